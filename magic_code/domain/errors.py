from __future__ import annotations

from typing import Any, Sequence


class MagicCodeError(Exception):
    """Base class for every condition the engine surfaces to its caller."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, error: str, message: str | None = None) -> None:
        super().__init__(message or error)
        self.error = error
        self.message = message or error

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class ConfigurationError(MagicCodeError):
    """Configuration violates one or more constraints. Raised at construction."""

    kind = "configuration"
    status_code = 500

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        super().__init__(
            "Invalid configuration",
            "Invalid configuration: " + "; ".join(self.errors),
        )


class ValidationError(MagicCodeError):
    """A required input field is missing or malformed."""

    kind = "validation"
    status_code = 400

    @classmethod
    def missing_field(cls, field: str, description: str) -> "ValidationError":
        return cls(
            f"Missing field: {field}",
            f"The {description} ({field}) is missing.",
        )

    @classmethod
    def invalid_field(cls, field: str) -> "ValidationError":
        return cls(f"Invalid field: {field}", f"The field {field} must be a string.")


class AuthError(MagicCodeError):
    """Code is unknown, already used, expired or bound to another identity.

    Deliberately a single error for all of these so callers cannot tell
    which check failed.
    """

    kind = "auth"
    status_code = 400

    def __init__(self) -> None:
        super().__init__(
            "Invalid code", "Code does not exist, is already used or is expired."
        )


class DeliveryError(MagicCodeError):
    """The delivery callback reported a failure; nothing was persisted."""

    kind = "delivery"
    status_code = 502

    def __init__(self, cause: Any) -> None:
        self.cause = cause
        super().__init__("Delivery failed", f"Could not deliver the code: {cause}")


class UnknownActionError(MagicCodeError):
    kind = "unknown_action"
    status_code = 500

    def __init__(self, action: Any) -> None:
        self.action = action
        super().__init__("Unknown action", f"Unknown action: {action!r}")
