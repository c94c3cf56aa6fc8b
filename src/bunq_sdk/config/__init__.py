"""Configuration for the bunq SDK."""
from .settings import BunqSettings, SettingsError, load_settings

__all__ = ["BunqSettings", "SettingsError", "load_settings"]
