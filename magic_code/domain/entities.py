from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class Action(str, Enum):
    LOGIN = "login"
    REGISTER = "register"
    CALLBACK = "callback"


@dataclass(frozen=True)
class Token:
    """Stored record for an outstanding code. Replaced, never mutated."""

    expires_at: datetime
    user: Mapping[str, Any]

    def is_expired(self, now: datetime) -> bool:
        # exactly-at-expiry counts as expired
        return self.expires_at <= now


@dataclass(frozen=True)
class AuthRequest:
    """
    Input containers of one authentication attempt.

    Field lookup walks them in `sources()` order, so the body overrides the
    query string which overrides path parameters.
    """

    body: Mapping[str, Any] | None = None
    query: Mapping[str, Any] | None = None
    params: Mapping[str, Any] | None = None

    def sources(self) -> list[Mapping[str, Any] | None]:
        return [self.body, self.query, self.params]


class OutcomeKind(str, Enum):
    PASS = "pass"
    SUCCESS = "success"


@dataclass(frozen=True)
class AuthOutcome:
    kind: OutcomeKind
    value: Any = None

    @classmethod
    def passed(cls, user: Any) -> "AuthOutcome":
        return cls(OutcomeKind.PASS, user)

    @classmethod
    def succeeded(cls, principal: Any) -> "AuthOutcome":
        return cls(OutcomeKind.SUCCESS, principal)
