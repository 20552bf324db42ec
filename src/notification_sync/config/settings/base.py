"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import Any, ClassVar

from notification_sync.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings.

    Each field ``name`` is read from ``{_prefix}_{NAME}``; subclasses set
    ``_prefix`` and override :meth:`_validate` for field and cross-field
    checks, reporting failures through :meth:`_reject`.
    """

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    @classmethod
    def env_key(cls, field_name: str) -> str:
        """Environment variable that feeds *field_name*, e.g. ``NOTIFY_WS_URL``."""
        return f"{cls._prefix}_{field_name}".upper().lstrip("_")

    def _reject(self, field_name: str, reason: str) -> None:
        raise InvalidSettingValueError(
            field_name,
            getattr(self, field_name),
            reason,
            env_key=self.env_key(field_name),
        )

    def _validate(self) -> None:
        """Override to add validation."""

    def as_dict(self) -> dict[str, Any]:
        """Field values keyed by name, for a startup log line."""
        return dataclasses.asdict(self)


__all__ = ["Settings"]
