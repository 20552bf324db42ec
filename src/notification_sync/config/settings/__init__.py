"""Config settings – 12-factor env-based configuration."""
from notification_sync.config.settings.base import Settings
from notification_sync.config.settings.loaders import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    SettingsLoader,
)
from notification_sync.config.settings.sync import NotificationSyncSettings

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "NotificationSyncSettings",
    "Settings",
    "SettingsLoader",
]
