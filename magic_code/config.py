from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from magic_code.domain.errors import ConfigurationError
from magic_code.infrastructure.memory.token_storage import MemoryTokenStorage

_STORAGE_METHODS = ("get", "set", "delete")
# one year
MAX_EXPIRES_IN_MINUTES = 60 * 24 * 365


class MagicCodeConfig(BaseModel):
    """
    Engine settings. Validated once, immutable afterwards.

    `secret` is only length-checked; code generation does not use it.
    `storage` is shared with the caller, who owns its lifecycle.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    secret: str = Field(..., min_length=16, repr=False)
    code_length: int = Field(4, ge=4)
    expires_in_minutes: float = Field(
        30, gt=0, le=MAX_EXPIRES_IN_MINUTES, allow_inf_nan=False
    )
    code_field_name: str = Field("code", min_length=1)
    user_key_field_name: str = Field("email", min_length=1)
    storage: Any = Field(default_factory=MemoryTokenStorage, repr=False)

    @field_validator("storage")
    @classmethod
    def _storage_contract(cls, value: Any) -> Any:
        missing = [
            name for name in _STORAGE_METHODS if not callable(getattr(value, name, None))
        ]
        if missing:
            raise ValueError("storage must implement " + ", ".join(missing))
        return value

    @property
    def expires_in(self) -> timedelta:
        return timedelta(minutes=self.expires_in_minutes)


@dataclass(frozen=True)
class ConfigValid:
    config: MagicCodeConfig
    ok: bool = True


@dataclass(frozen=True)
class ConfigInvalid:
    errors: tuple[str, ...]
    ok: bool = False


ConfigResult = Union[ConfigValid, ConfigInvalid]


def _format_errors(exc: PydanticValidationError) -> tuple[str, ...]:
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "config"
        messages.append(f"{field}: {err['msg']}")
    return tuple(messages)


def validate_config(raw: Mapping[str, Any] | None = None, **overrides: Any) -> ConfigResult:
    """
    Check every constraint and report all violations, not just the first.

    Keys of `raw` are MagicCodeConfig field names; keyword overrides win.
    """
    values = {**(raw or {}), **overrides}
    try:
        return ConfigValid(MagicCodeConfig(**values))
    except PydanticValidationError as exc:
        return ConfigInvalid(_format_errors(exc))


def load_config(raw: Mapping[str, Any] | None = None, **overrides: Any) -> MagicCodeConfig:
    """validate_config(), raising ConfigurationError on failure."""
    result = validate_config(raw, **overrides)
    if isinstance(result, ConfigInvalid):
        raise ConfigurationError(result.errors)
    return result.config
