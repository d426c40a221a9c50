from __future__ import annotations

import inspect
from typing import Any, Callable


async def invoke(callback: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async callback and return its (awaited) result."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
