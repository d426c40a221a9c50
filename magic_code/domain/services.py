# magic_code/domain/services.py
from __future__ import annotations

import hmac
import secrets
from typing import Any, Final, Iterable, Mapping


class _Missing:
    """Sentinel for "no source carries the field" (distinct from None)."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


def code_bounds(code_length: int) -> tuple[int, int]:
    """
    Half-open range [low, high) that generated codes are drawn from.

    high is 10**n - 1, so the all-nines code of a given length is never
    produced.
    """
    if code_length < 1:
        raise ValueError("code_length must be positive")
    return 10 ** (code_length - 1), 10**code_length - 1


def generate_code(code_length: int) -> int:
    """Uniform, CSPRNG-backed numeric code with exactly `code_length` digits."""
    low, high = code_bounds(code_length)
    return low + secrets.randbelow(high - low)


def lookup(sources: Iterable[Mapping[str, Any] | None], field: str) -> Any:
    """
    Value of `field` from the first source that has it as a key.

    Presence is structural: a source holding None or "" for the field still
    wins over later sources. Sources that are None or not mappings are
    skipped. Returns MISSING when no source has the key.
    """
    for source in sources:
        if isinstance(source, Mapping) and field in source:
            return source[field]
    return MISSING


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        return hmac.compare_digest(a, b)
    except TypeError:
        # compare_digest rejects non-ASCII str
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
