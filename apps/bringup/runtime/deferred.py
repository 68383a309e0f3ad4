"""Deferred-computation helpers: settled results, all-settled barriers, detached tasks."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from contextvars import Context
from dataclasses import dataclass
from typing import Any

_DETACHED: set[asyncio.Task[Any]] = set()


@dataclass(frozen=True, slots=True)
class Settled:
    ok: bool
    value: Any = None
    error: BaseException | None = None


async def settle(awaitable: Awaitable[Any]) -> Settled:
    """Await one computation and capture its outcome instead of raising."""

    try:
        value = await awaitable
    except Exception as exc:  # noqa: BLE001 - outcome is reported to the caller
        return Settled(ok=False, error=exc)
    return Settled(ok=True, value=value)


async def all_settled(awaitables: Iterable[Awaitable[Any]]) -> list[Settled]:
    """Wait for every computation, never short-circuiting on a failure."""

    return list(await asyncio.gather(*(settle(item) for item in awaitables)))


async def call_hook(hook: Callable[[], Any]) -> Any:
    result = hook()
    if inspect.isawaitable(result):
        return await result
    return result


def spawn_detached(hook: Callable[[], Any], *, name: str, context: Context | None = None) -> asyncio.Task[Any]:
    """Run ``hook`` on its own task and return immediately.

    The task is neither joined nor error-observed; a strong reference is held
    only until it finishes so it cannot be collected mid-flight.
    """

    task = asyncio.get_running_loop().create_task(call_hook(hook), name=name, context=context)
    _DETACHED.add(task)
    task.add_done_callback(_DETACHED.discard)
    return task


def detached_count() -> int:
    return len(_DETACHED)
