"""Module model: named units with optional init/start hooks."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from connectors.transport.endpoint import Middleware

Hook = Callable[[], Any]


@dataclass(frozen=True, eq=False)
class Module:
    """Base module. ``init`` and ``start`` may be sync or return awaitables."""

    name: str
    init: Hook | None = None
    start: Hook | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("module name must be a non-empty string")


@dataclass(frozen=True, eq=False)
class Service(Module):
    """Authority-side module; ``remote`` is published across the boundary."""

    remote: Mapping[str, Any] = field(default_factory=dict)
    middleware: Middleware | None = None


@dataclass(frozen=True, eq=False)
class Controller(Module):
    """Dependent-side module."""


def create_service(
    name: str,
    *,
    init: Hook | None = None,
    start: Hook | None = None,
    remote: Mapping[str, Any] | None = None,
    middleware: Middleware | None = None,
) -> Service:
    return Service(name=name, init=init, start=start, remote=dict(remote or {}), middleware=middleware)


def create_controller(name: str, *, init: Hook | None = None, start: Hook | None = None) -> Controller:
    return Controller(name=name, init=init, start=start)
