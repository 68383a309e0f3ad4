"""In-process transport package: signals, flags, endpoints and discovery."""

from .bus import Connection, Signal
from .config import AUTHORITY_READY_FLAG, DEPENDENT_READY_FLAG, SERVICE_NAMESPACE, TransportConfig
from .dependencies import TransportDependencies, build_transport_dependencies
from .endpoint import Middleware, RemoteEndpoint, RemoteSignal
from .errors import TransportError, TransportErrorCode
from .flags import BoundaryFlag
from .interfaces import Transport
from .proxy import RemoteSignalView, ServiceProxy
from .registry import InMemoryTransport, get_shared_transport

__all__ = [
    "AUTHORITY_READY_FLAG",
    "BoundaryFlag",
    "Connection",
    "DEPENDENT_READY_FLAG",
    "InMemoryTransport",
    "Middleware",
    "RemoteEndpoint",
    "RemoteSignal",
    "RemoteSignalView",
    "SERVICE_NAMESPACE",
    "ServiceProxy",
    "Signal",
    "Transport",
    "TransportConfig",
    "TransportDependencies",
    "TransportError",
    "TransportErrorCode",
    "build_transport_dependencies",
    "get_shared_transport",
]
