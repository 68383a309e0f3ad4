"""Execution-context tagging so work can be attributed to the module running it."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import Context, ContextVar, copy_context

_current_module: ContextVar[str | None] = ContextVar("bringup_current_module", default=None)


def current_module_name() -> str | None:
    return _current_module.get()


def module_context(name: str) -> Context:
    """Copy of the current context with ``name`` as the running module, for new tasks."""

    context = copy_context()
    context.run(_current_module.set, name)
    return context


@contextmanager
def module_scope(name: str) -> Iterator[None]:
    token = _current_module.set(name)
    try:
        yield
    finally:
        _current_module.reset(token)


class ModuleContextFilter(logging.Filter):
    """Stamps ``lifecycle_module`` on records emitted while a module hook runs."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.lifecycle_module = _current_module.get()
        return True
