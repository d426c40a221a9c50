from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from magic_code.application.invoke import invoke
from magic_code.config import MagicCodeConfig
from magic_code.domain.entities import Token
from magic_code.domain.errors import AuthError, ValidationError
from magic_code.domain.ports.callbacks import Options, VerifyCallback
from magic_code.domain.ports.token_storage import AtomicTokenStoragePort
from magic_code.domain.services import MISSING, lookup, secure_compare


def _resolve(sources: list[Mapping[str, Any] | None], field: str) -> str | None:
    value = lookup(sources, field)
    if value is MISSING or value is None:
        return None
    return str(value)


def _token_matches(
    token: Token | None, user_key_field: str, user_key: str, now: datetime
) -> bool:
    if token is None or not isinstance(token.user, Mapping):
        return False
    if user_key_field not in token.user:
        return False
    stored = token.user[user_key_field]
    if not stored:
        return False
    if not secure_compare(str(stored), user_key):
        return False
    return not token.is_expired(now)


async def verify_code(
    config: MagicCodeConfig,
    callback: VerifyCallback,
    sources: Iterable[Mapping[str, Any] | None],
    options: Options,
    *,
    clock: Callable[[], datetime] | None = None,
) -> Any:
    """
    Validate a presented code, consume it, and hand the stored user to
    `callback`. The callback's result is returned as the principal.

    Order is fixed: input checks (no storage access), token validation,
    consumption, callback. A callback that raises cannot bring the code back.
    """
    sources = list(sources)
    code = _resolve(sources, config.code_field_name)
    if not code:
        raise ValidationError.missing_field(config.code_field_name, "code field")
    user_key = _resolve(sources, config.user_key_field_name)
    if not user_key:
        raise ValidationError.missing_field(config.user_key_field_name, "primary key")

    storage = config.storage
    token = await storage.get(code)
    checked_at = clock() if clock else datetime.now(timezone.utc)
    if not _token_matches(token, config.user_key_field_name, user_key, checked_at):
        raise AuthError()

    if isinstance(storage, AtomicTokenStoragePort):
        if not await storage.consume(code, token):
            # another verification consumed or replaced it in the meantime
            raise AuthError()
    else:
        await storage.delete(code)

    return await invoke(callback, token.user, options)
