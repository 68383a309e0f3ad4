"""Remote endpoints: the named surface a service exposes across the boundary."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .bus import Connection, Signal
from .errors import TransportError, TransportErrorCode

logger = logging.getLogger(__name__)

InboundGuard = Callable[[str, list[Any]], bool]
OutboundTransform = Callable[[str, Any], Any]


@dataclass(frozen=True)
class Middleware:
    """Ordered guards applied to inbound calls and transforms applied to results."""

    inbound: Sequence[InboundGuard] = ()
    outbound: Sequence[OutboundTransform] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "inbound", tuple(self.inbound))
        object.__setattr__(self, "outbound", tuple(self.outbound))


@dataclass(frozen=True)
class _Delivery:
    args: tuple[Any, ...]
    only: frozenset[str] | None = None
    excluded: frozenset[str] = field(default_factory=frozenset)

    def reaches(self, caller: str) -> bool:
        if caller in self.excluded:
            return False
        return self.only is None or caller in self.only


class RemoteSignal:
    """Authority-side broadcast member; dependents connect per caller id."""

    def __init__(self) -> None:
        self._deliveries: Signal[_Delivery] = Signal()

    @property
    def connection_count(self) -> int:
        return self._deliveries.subscriber_count

    def fire(self, caller: str, *args: Any) -> None:
        self._deliveries.emit(_Delivery(args=args, only=frozenset({caller})))

    def fire_all(self, *args: Any) -> None:
        self._deliveries.emit(_Delivery(args=args))

    def fire_except(self, caller: str, *args: Any) -> None:
        self._deliveries.emit(_Delivery(args=args, excluded=frozenset({caller})))

    def connect(self, caller: str, handler: Callable[..., object]) -> Connection:
        def _deliver(delivery: _Delivery) -> None:
            if delivery.reaches(caller):
                handler(*delivery.args)

        return self._deliveries.subscribe(_deliver)


class RemoteEndpoint:
    """Named set of remote functions and signals, built before publication.

    Members are appended with ``add_member`` until the endpoint is sealed,
    which the transport does when it publishes it. Remote functions receive
    the caller id as their first argument.
    """

    def __init__(self, name: str, middleware: Middleware | None = None) -> None:
        self.name = name
        self.middleware = middleware or Middleware()
        self._functions: dict[str, Callable[..., Any]] = {}
        self._signals: dict[str, RemoteSignal] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def function_names(self) -> tuple[str, ...]:
        return tuple(self._functions)

    @property
    def signal_names(self) -> tuple[str, ...]:
        return tuple(self._signals)

    def add_member(self, member_name: str, member: Any) -> None:
        if self._sealed:
            raise TransportError(
                TransportErrorCode.ENDPOINT_SEALED,
                f"endpoint {self.name!r} is sealed; cannot add {member_name!r}",
            )
        if isinstance(member, RemoteSignal):
            self._signals[member_name] = member
        elif callable(member):
            self._functions[member_name] = member
        else:
            raise TransportError(
                TransportErrorCode.UNSUPPORTED_MEMBER,
                f"{self.name}.{member_name} must be callable or a RemoteSignal, got {type(member).__name__}",
            )

    def seal(self) -> None:
        self._sealed = True

    def signal(self, member_name: str) -> RemoteSignal:
        try:
            return self._signals[member_name]
        except KeyError as exc:
            raise TransportError(
                TransportErrorCode.UNKNOWN_MEMBER,
                f"endpoint {self.name!r} has no signal {member_name!r}",
                cause=exc,
            ) from exc

    async def invoke(self, member_name: str, caller: str, *args: Any) -> Any:
        function = self._functions.get(member_name)
        if function is None:
            raise TransportError(
                TransportErrorCode.UNKNOWN_MEMBER,
                f"endpoint {self.name!r} has no function {member_name!r}",
            )

        call_args = list(args)
        for guard in self.middleware.inbound:
            if not guard(caller, call_args):
                logger.warning(
                    "bringup_remote_call_rejected",
                    extra={"event": "remote_call_rejected", "endpoint": self.name, "member": member_name, "caller": caller},
                )
                raise TransportError(
                    TransportErrorCode.REJECTED,
                    f"call to {self.name}.{member_name} rejected by inbound middleware",
                )

        result = function(caller, *call_args)
        if inspect.isawaitable(result):
            result = await result

        for transform in self.middleware.outbound:
            result = transform(caller, result)
        return result
