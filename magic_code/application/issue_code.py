from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

import magic_code.domain.services as domain_services
from magic_code.application.invoke import invoke
from magic_code.config import MagicCodeConfig
from magic_code.domain.entities import Action, Token
from magic_code.domain.errors import DeliveryError, MagicCodeError, ValidationError
from magic_code.domain.ports.callbacks import Options, SendCodeCallback


def _project_user(
    user: Mapping[str, Any], user_key: str, action: Any
) -> Mapping[str, Any]:
    # only registration keeps the whole record retrievable at verification
    if action == Action.REGISTER:
        return dict(user)
    return {user_key: user[user_key]}


async def issue_code(
    config: MagicCodeConfig,
    send_code: SendCodeCallback,
    user: Mapping[str, Any] | None,
    options: Options | None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> Mapping[str, Any]:
    """
    Generate a code, deliver it, then persist it.

    Delivery comes first: if it fails nothing is stored, so no usable code
    exists that the user never received. Returns the input record.
    """
    user_key = config.user_key_field_name
    if not isinstance(user, Mapping) or user_key not in user:
        raise ValidationError.missing_field(user_key, "primary key")
    if not isinstance(user[user_key], str):
        raise ValidationError.invalid_field(user_key)

    code = domain_services.generate_code(config.code_length)

    try:
        error = await invoke(send_code, user, code, options)
    except MagicCodeError:
        raise
    except Exception as exc:
        raise DeliveryError(exc) from exc
    if error is not None:
        if isinstance(error, BaseException):
            raise DeliveryError(error) from error
        raise DeliveryError(error)

    action = options.get("action") if isinstance(options, Mapping) else None
    issued_at = clock() if clock else datetime.now(timezone.utc)
    token = Token(
        expires_at=issued_at + config.expires_in,
        user=_project_user(user, user_key, action),
    )
    await config.storage.set(str(code), token)
    return user
