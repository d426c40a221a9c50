from __future__ import annotations

import asyncio

from magic_code.domain.entities import Token
from magic_code.domain.ports.token_storage import AtomicTokenStoragePort


class MemoryTokenStorage(AtomicTokenStoragePort):
    """
    In-process default backend: a dict guarded by an asyncio.Lock.

    Nothing is swept; expired tokens stay until overwritten, consumed or
    cleared. Not shared between processes.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, Token] = {}
        self._lock = asyncio.Lock()

    async def get(self, code: str) -> Token | None:
        async with self._lock:
            return self._tokens.get(code)

    async def set(self, code: str, token: Token) -> None:
        async with self._lock:
            self._tokens[code] = token

    async def delete(self, code: str) -> None:
        async with self._lock:
            self._tokens.pop(code, None)

    async def consume(self, code: str, token: Token) -> bool:
        async with self._lock:
            current = self._tokens.get(code)
            if current is None or current != token:
                return False
            del self._tokens[code]
            return True

    def snapshot(self) -> dict[str, Token]:
        """Copy of the current contents."""
        return dict(self._tokens)

    def clear(self) -> None:
        self._tokens.clear()

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, code: object) -> bool:
        return code in self._tokens
