"""
Configuration settings - Infrastructure component for managing client configuration.
Uses pydantic-settings for validation and environment variable loading.
"""

from __future__ import annotations
import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

API_KEY_ENV = 'CEREBRAS_API_KEY'
DEFAULT_BASE_URL = 'https://api.cerebras.ai/v1/'


class CerebrasSettings(BaseSettings):
    """Cerebras Cloud client configuration.

    Every field can be set through a ``CEREBRAS_``-prefixed environment
    variable or a ``.env`` file, e.g. ``CEREBRAS_MAX_RETRIES=5``.
    """

    model_config = SettingsConfigDict(
        env_prefix='CEREBRAS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    api_key: Optional[str] = Field(None, description='Bearer token (CEREBRAS_API_KEY)')
    base_url: str = Field(DEFAULT_BASE_URL)

    # Generation defaults used by the single-prompt API
    default_model: str = Field('llama3.1-70b')
    default_temperature: float = Field(0.7, ge=0.0, le=2.0)
    default_max_tokens: int = Field(1024, ge=1, le=8192)

    # Transport
    timeout_seconds: float = Field(30.0, ge=1, le=600)
    max_retries: int = Field(3, ge=0, le=10)

    # Logging
    enable_logging: bool = Field(True)
    log_level: str = Field('INFO')

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL; normalize to a trailing slash."""
        v = (v or '').strip()
        parsed = urlparse(v)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError('base_url must be an absolute http(s) URL')
        return v if v.endswith('/') else v + '/'

    @field_validator('default_model')
    @classmethod
    def validate_default_model(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('default_model is required')
        return v.strip()

    @field_validator('api_key')
    @classmethod
    def blank_api_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            return 'INFO'
        return v.upper()

    def resolved_api_key(self) -> Optional[str]:
        """API key from settings, else from the CEREBRAS_API_KEY environment variable."""
        if self.api_key:
            return self.api_key
        env_key = os.getenv(API_KEY_ENV, '').strip()
        return env_key or None

    def validate_required_settings(self) -> List[str]:
        """Validate required settings and return list of missing ones."""
        missing = []
        if not self.resolved_api_key():
            missing.append(API_KEY_ENV)
        return missing

    def to_dict(self) -> Dict[str, Any]:
        """Dump settings with the API key masked."""
        data = self.model_dump()
        if data.get('api_key'):
            data['api_key'] = data['api_key'][:4] + '***'
        return data


# Global settings instance
_settings: Optional[CerebrasSettings] = None


def get_settings() -> CerebrasSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = CerebrasSettings()
    return _settings


def reload_settings() -> CerebrasSettings:
    """Reload settings from environment (for testing)."""
    global _settings
    _settings = CerebrasSettings()
    return _settings
