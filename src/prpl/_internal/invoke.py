"""Invoke helpers — call sync or async callables uniformly.

Templates, overridden static handlers, and middleware may be plain
functions or coroutines. This keeps the sync/async check in one place::

    response = await invoke(build.template.render, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
