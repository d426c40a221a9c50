from __future__ import annotations

from typing import Any, Awaitable, Mapping, Protocol, Union

Options = Mapping[str, Any]


class SendCodeCallback(Protocol):
    def __call__(
        self, user: Mapping[str, Any], code: int, options: Options
    ) -> Union[Any, Awaitable[Any]]:
        """
        Deliver `code` to the user. Return None on success; anything else is
        treated as the error that aborted delivery.
        """


class VerifyCallback(Protocol):
    def __call__(
        self, user: Mapping[str, Any], options: Options
    ) -> Union[Any, Awaitable[Any]]:
        """Turn the stored user record into the authenticated principal."""
