from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from magic_code.application.issue_code import issue_code
from magic_code.application.verify_code import verify_code
from magic_code.config import MagicCodeConfig, load_config
from magic_code.domain.entities import Action, AuthOutcome, AuthRequest
from magic_code.domain.errors import UnknownActionError
from magic_code.domain.ports.callbacks import Options, SendCodeCallback, VerifyCallback


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MagicCodeStrategy:
    """
    Entry point: dispatches an authentication attempt by its action.

    "login" and "register" issue a code and end in a PASS outcome carrying
    the submitted record; "callback" verifies a code and ends in SUCCESS
    carrying whatever the verification callback returned.

    Usage:
        strategy = MagicCodeStrategy({"secret": "..."}, send_code, callback)
        await strategy.authenticate(AuthRequest(body={"email": "a@b.com"}),
                                    {"action": "login"})
    """

    name = "magic-code"

    def __init__(
        self,
        config: MagicCodeConfig | Mapping[str, Any],
        send_code: SendCodeCallback,
        callback: VerifyCallback,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not isinstance(config, MagicCodeConfig):
            config = load_config(config)
        if not callable(send_code):
            raise TypeError("send_code must be callable")
        if not callable(callback):
            raise TypeError("callback must be callable")
        self.config = config
        self.send_code = send_code
        self.callback = callback
        self._clock = clock

    @property
    def storage(self):
        return self.config.storage

    async def authenticate(self, request: AuthRequest, options: Options) -> AuthOutcome:
        action = options.get("action") if isinstance(options, Mapping) else None
        if action == Action.CALLBACK:
            return await self.accept_code(request, options)
        if action in (Action.LOGIN, Action.REGISTER):
            return await self.request_code(request, options)
        raise UnknownActionError(action)

    async def request_code(self, request: AuthRequest, options: Options) -> AuthOutcome:
        user = await issue_code(
            self.config, self.send_code, request.body, options, clock=self._clock
        )
        return AuthOutcome.passed(user)

    async def accept_code(self, request: AuthRequest, options: Options) -> AuthOutcome:
        principal = await verify_code(
            self.config, self.callback, request.sources(), options, clock=self._clock
        )
        return AuthOutcome.succeeded(principal)
