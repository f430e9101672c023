"""Shape display events and the hook invocation helper.

Hooks may be plain callables or coroutine functions. They run strictly in
registration order.
"""

from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Callable, Iterable, TypeVar

from .context import ShapeDisplayContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ShapeDisplayEvents:
    """Global display lifecycle hooks. Override the phases you need."""

    async def displaying(self, context: ShapeDisplayContext) -> None:
        pass

    async def displayed(self, context: ShapeDisplayContext) -> None:
        pass

    async def displaying_finalized(self, context: ShapeDisplayContext) -> None:
        """Runs after every render, including failed ones."""
        pass


def _hook_name(item: Any) -> str:
    name = getattr(item, "__qualname__", None)
    if name is None:
        name = type(item).__qualname__
    return name


async def invoke_async(
    items: Iterable[T],
    call: Callable[[T], Any],
    log: logging.Logger = logger,
    fail_fast: bool = True,
) -> None:
    """Call ``call(item)`` for each item in order, awaiting awaitable results.

    Failures are logged with the hook's name. With ``fail_fast`` the
    exception is re-raised and the remaining items are skipped; otherwise
    the next item runs.
    """
    for item in list(items):
        try:
            result = call(item)
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.exception("Display hook %s failed", _hook_name(item))
            if fail_fast:
                raise


class DisplayTimingEvents(ShapeDisplayEvents):
    """Logs how long each shape took to render, failed renders included."""

    def __init__(self, log: logging.Logger = logger):
        self._log = log
        self._started: dict[int, float] = {}

    async def displaying(self, context: ShapeDisplayContext) -> None:
        self._started[id(context)] = time.perf_counter()

    async def displaying_finalized(self, context: ShapeDisplayContext) -> None:
        started = self._started.pop(id(context), None)
        if started is None:
            return
        elapsed_ms = (time.perf_counter() - started) * 1000
        self._log.debug("Rendered shape %s in %.2fms", context.shape_metadata.type, elapsed_ms)
