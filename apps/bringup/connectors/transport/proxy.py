"""Dependent-side views of published endpoints."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from .bus import Connection
from .endpoint import RemoteEndpoint, RemoteSignal


class RemoteSignalView:
    """Subscribe-only handle on a remote signal for one caller."""

    def __init__(self, signal: RemoteSignal, caller: str) -> None:
        self._signal = signal
        self._caller = caller

    def connect(self, handler: Callable[..., object]) -> Connection:
        return self._signal.connect(self._caller, handler)


class ServiceProxy:
    """Attribute-style access to one endpoint's functions and signals.

    ``proxy.ping(1)`` returns an awaitable that invokes the remote ``ping``
    with this proxy's caller id; ``proxy.changed.connect(fn)`` subscribes to a
    remote signal.
    """

    def __init__(self, endpoint: RemoteEndpoint, caller: str) -> None:
        self._endpoint = endpoint
        self._caller = caller
        self._members: dict[str, Any] = {}
        for member_name in endpoint.function_names:
            self._members[member_name] = self._bind_function(member_name)
        for member_name in endpoint.signal_names:
            self._members[member_name] = RemoteSignalView(endpoint.signal(member_name), caller)

    @property
    def name(self) -> str:
        return self._endpoint.name

    @property
    def members(self) -> tuple[str, ...]:
        return tuple(self._members)

    def __getattr__(self, member_name: str) -> Any:
        members = self.__dict__.get("_members", {})
        if member_name in members:
            return members[member_name]
        raise AttributeError(f"service {self._endpoint.name!r} exposes no member {member_name!r}")

    def __repr__(self) -> str:
        return f"ServiceProxy(name={self._endpoint.name!r}, members={sorted(self._members)!r})"

    def _bind_function(self, member_name: str) -> Callable[..., Awaitable[Any]]:
        async def _call(*args: Any) -> Any:
            return await self._endpoint.invoke(member_name, self._caller, *args)

        _call.__name__ = member_name
        return _call
