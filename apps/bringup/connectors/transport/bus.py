"""Synchronous observer-list signals used for lifecycle fan-out."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class Connection:
    """Handle returned by ``Signal.subscribe``; disconnecting is idempotent."""

    def __init__(self, signal: "Signal[T]", handler: Callable[[T], object]) -> None:
        self._signal = signal
        self._handler = handler
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        self._signal._remove(self)


class Signal(Generic[T]):
    """Broadcast channel with zero or many subscribers.

    ``emit`` runs handlers inline, in subscription order, over a snapshot of
    the current subscribers so handlers may connect or disconnect while an
    emission is in flight. Handler errors propagate to the emitter.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._connections: list[Connection] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._connections)

    def subscribe(self, handler: Callable[[T], object]) -> Connection:
        connection = Connection(self, handler)
        self._connections.append(connection)
        return connection

    def emit(self, payload: T) -> None:
        for connection in list(self._connections):
            if connection.connected:
                connection._handler(payload)

    def disconnect_all(self) -> None:
        for connection in list(self._connections):
            connection.disconnect()

    def _remove(self, connection: Connection) -> None:
        if connection in self._connections:
            self._connections.remove(connection)
