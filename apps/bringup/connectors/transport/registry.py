"""In-process transport registry shared by the authority and dependent sides."""

from __future__ import annotations

import logging
import threading

from .endpoint import RemoteEndpoint
from .errors import TransportError, TransportErrorCode
from .flags import BoundaryFlag

logger = logging.getLogger(__name__)


class InMemoryTransport:
    """Publishes endpoints by namespace and hands out shared boundary flags.

    Any number of readers may look a flag up with ``flag``; only one writer
    may ``claim_flag`` it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._namespaces: dict[str, dict[str, RemoteEndpoint]] = {}
        self._flags: dict[str, BoundaryFlag] = {}
        self._claimed: set[str] = set()

    def publish(self, namespace: str, name: str, endpoint: RemoteEndpoint) -> None:
        with self._lock:
            published = self._namespaces.setdefault(namespace, {})
            if name in published:
                raise TransportError(
                    TransportErrorCode.DUPLICATE_ENDPOINT,
                    f"endpoint {name!r} already published under {namespace!r}",
                )
            endpoint.seal()
            published[name] = endpoint
        logger.info(
            "bringup_endpoint_published",
            extra={
                "event": "endpoint_published",
                "namespace": namespace,
                "endpoint": name,
                "functions": list(endpoint.function_names),
                "signals": list(endpoint.signal_names),
            },
        )

    def discover_all(self, namespace: str) -> dict[str, RemoteEndpoint]:
        with self._lock:
            return dict(self._namespaces.get(namespace, {}))

    def flag(self, name: str) -> BoundaryFlag:
        with self._lock:
            return self._flag_locked(name)

    def claim_flag(self, name: str) -> BoundaryFlag:
        with self._lock:
            if name in self._claimed:
                raise TransportError(
                    TransportErrorCode.FLAG_ALREADY_CLAIMED,
                    f"flag {name!r} already has a writer on this transport",
                )
            self._claimed.add(name)
            return self._flag_locked(name)

    def _flag_locked(self, name: str) -> BoundaryFlag:
        flag = self._flags.get(name)
        if flag is None:
            flag = BoundaryFlag(name)
            self._flags[name] = flag
        return flag


_SHARED_TRANSPORT: InMemoryTransport | None = None
_SHARED_TRANSPORT_LOCK = threading.Lock()


def get_shared_transport() -> InMemoryTransport:
    global _SHARED_TRANSPORT
    with _SHARED_TRANSPORT_LOCK:
        if _SHARED_TRANSPORT is None:
            _SHARED_TRANSPORT = InMemoryTransport()
        return _SHARED_TRANSPORT
