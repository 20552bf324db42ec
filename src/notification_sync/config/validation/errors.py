"""Config validation errors.

Both setting errors name the dataclass field and the ``NOTIFY_*``
variable it is read from, in attributes and in ``detail``.
"""
from __future__ import annotations

from notification_sync.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Settings could not be loaded or failed validation."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A setting without a default has no environment variable."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str, env_key: str) -> None:
        super().__init__(
            f"Required setting '{setting_name}' is missing (set {env_key})",
            detail={"setting": setting_name, "env_key": env_key},
        )
        self.setting_name = setting_name
        self.env_key = env_key


class InvalidSettingValueError(ConfigError):
    """A setting is present but cannot be used as given."""
    default_code = "invalid_setting_value"

    def __init__(
        self,
        setting_name: str,
        value: object,
        reason: str,
        *,
        env_key: str | None = None,
    ) -> None:
        source = f" ({env_key})" if env_key else ""
        super().__init__(
            f"Setting '{setting_name}'{source} has invalid value {value!r}: {reason}",
            detail={"setting": setting_name, "env_key": env_key, "reason": reason},
        )
        self.setting_name = setting_name
        self.env_key = env_key
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
