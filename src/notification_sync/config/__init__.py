"""Config – 12-factor settings and loaders."""

from notification_sync.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    NotificationSyncSettings,
    Settings,
    SettingsLoader,
)
from notification_sync.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "NotificationSyncSettings",
    "Settings",
    "SettingsLoader",
]
