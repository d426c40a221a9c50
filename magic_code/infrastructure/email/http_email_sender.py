from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from magic_code.domain.ports.email_port import EmailPort

logger = logging.getLogger("magic_code.infrastructure.email.http_email_sender")


class HttpEmailCodeSender(EmailPort):
    """
    Mail relay client that doubles as a delivery callback.

    Called as `sender(user, code, options)` it mails the code to
    `user[recipient_field]` and returns None, or returns the exception when
    the relay could not be reached or refused the message.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
        recipient_field: str = "email",
        subject: str = "Your sign-in code",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._recipient_field = recipient_field
        self._subject = subject
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        headers: Dict[str, str] = {}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        url = f"{self._base_url}{self._send_path}"
        payload = {"to": to, "subject": subject, "body": body}

        try:
            resp = await self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise RuntimeError(f"mail relay HTTP error: {e}") from e
        if not (200 <= resp.status_code < 300):
            raise RuntimeError(f"mail relay responded {resp.status_code}: {resp.text[:200]}")

    def render(self, code: int, options: Mapping[str, Any]) -> str:
        if options.get("action") == "register":
            return f"Welcome! Your registration code is {code}"
        return f"Your sign-in code is {code}"

    async def __call__(
        self, user: Mapping[str, Any], code: int, options: Mapping[str, Any]
    ) -> Exception | None:
        to = user.get(self._recipient_field)
        if not to:
            return ValueError(f"user record has no {self._recipient_field}")
        try:
            await self.send(
                to=str(to),
                subject=self._subject,
                body=self.render(code, options),
                idempotency_key=f"magic-code:{to}:{code}",
            )
        except RuntimeError as e:
            logger.warning(
                "magic code delivery failed",
                extra={"action": options.get("action"), "error": str(e)},
            )
            return e
        return None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
