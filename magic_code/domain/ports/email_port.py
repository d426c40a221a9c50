from __future__ import annotations

from typing import Protocol


class EmailPort(Protocol):
    """Outbound mail used to deliver magic codes."""

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        """Send one message. Raises on relay or transport failure."""
