"""Configuration package."""

from .settings import CerebrasSettings, get_settings, reload_settings

__all__ = ['CerebrasSettings', 'get_settings', 'reload_settings']
