from __future__ import annotations

from typing import Protocol, runtime_checkable

from magic_code.domain.entities import Token


@runtime_checkable
class TokenStoragePort(Protocol):
    """
    Async code -> Token store. Shared and owned by the caller.

    A present key means "issued and not consumed"; it may still be expired.
    Absence does not say whether the code was never issued, swept or used.
    """

    async def get(self, code: str) -> Token | None:
        """Return the token stored under `code`, or None."""

    async def set(self, code: str, token: Token) -> None:
        """Store/replace the token for `code`."""

    async def delete(self, code: str) -> None:
        """Remove `code`. Removing an absent code is not an error."""


@runtime_checkable
class AtomicTokenStoragePort(TokenStoragePort, Protocol):
    """
    Storage that can consume a token atomically.

    Without it, two concurrent verifications of the same code can both pass
    validation before either deletes it.
    """

    async def consume(self, code: str, token: Token) -> bool:
        """
        Delete `code` only if it still holds `token`.
        True if this call removed it, False if it was gone or replaced.
        """
