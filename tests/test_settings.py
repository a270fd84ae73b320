import pytest
from pydantic import ValidationError

from cerebras_cloud.infrastructure.config import CerebrasSettings, get_settings, reload_settings


def test_defaults():
    settings = CerebrasSettings()

    assert settings.api_key is None
    assert settings.base_url == 'https://api.cerebras.ai/v1/'
    assert settings.default_model == 'llama3.1-70b'
    assert settings.default_temperature == 0.7
    assert settings.default_max_tokens == 1024
    assert settings.timeout_seconds == 30.0
    assert settings.max_retries == 3
    assert settings.enable_logging is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('CEREBRAS_API_KEY', 'csk-from-env-123')
    monkeypatch.setenv('CEREBRAS_MAX_RETRIES', '5')
    monkeypatch.setenv('CEREBRAS_BASE_URL', 'http://localhost:8080/v1')

    settings = reload_settings()

    assert settings.api_key == 'csk-from-env-123'
    assert settings.max_retries == 5
    assert settings.base_url == 'http://localhost:8080/v1/'
    assert get_settings() is settings


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / '.env').write_text('CEREBRAS_DEFAULT_MODEL=llama3.1-8b\n')
    assert CerebrasSettings().default_model == 'llama3.1-8b'


@pytest.mark.parametrize('field,value', [
    ('default_temperature', 2.5),
    ('default_max_tokens', 0),
    ('default_max_tokens', 9000),
    ('timeout_seconds', 0),
    ('timeout_seconds', 601),
    ('max_retries', 11),
    ('max_retries', -1),
    ('base_url', 'api.cerebras.ai/v1'),
    ('base_url', 'ftp://api.cerebras.ai/'),
    ('default_model', '  '),
])
def test_out_of_range_values_rejected(field, value):
    with pytest.raises(ValidationError):
        CerebrasSettings(**{field: value})


def test_api_key_falls_back_to_environment(monkeypatch):
    settings = CerebrasSettings()
    assert settings.resolved_api_key() is None
    assert settings.validate_required_settings() == ['CEREBRAS_API_KEY']

    monkeypatch.setenv('CEREBRAS_API_KEY', 'csk-late-key-1')
    assert settings.resolved_api_key() == 'csk-late-key-1'
    assert settings.validate_required_settings() == []


def test_blank_api_key_is_unset():
    assert CerebrasSettings(api_key='   ').api_key is None


def test_to_dict_masks_api_key():
    data = CerebrasSettings(api_key='csk-secret-value').to_dict()
    assert data['api_key'] == 'csk-***'
    assert 'secret' not in str(data)


def test_invalid_log_level_falls_back_to_info():
    assert CerebrasSettings(log_level='verbose').log_level == 'INFO'
    assert CerebrasSettings(log_level='debug').log_level == 'DEBUG'
