import os

import pytest

from cerebras_cloud.infrastructure.config import settings as settings_module


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Each test starts with no CEREBRAS_* variables, no .env and a fresh settings singleton."""
    for key in list(os.environ):
        if key.startswith('CEREBRAS_'):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, '_settings', None)
    yield
