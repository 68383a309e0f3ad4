"""Dependency injection entry points for transport collaborators."""

from __future__ import annotations

from dataclasses import dataclass

from .config import TransportConfig
from .flags import BoundaryFlag
from .interfaces import Transport
from .registry import get_shared_transport


@dataclass(frozen=True)
class TransportDependencies:
    """Container exposing the transport and the flags each side announces on it."""

    transport: Transport
    authority_ready: BoundaryFlag
    dependent_ready: BoundaryFlag


def build_transport_dependencies(
    config: TransportConfig | None = None,
    transport: Transport | None = None,
) -> TransportDependencies:
    """Build the default transport wiring, falling back to the shared registry."""

    resolved_config = config or TransportConfig.from_env()
    resolved_transport = transport or get_shared_transport()
    return TransportDependencies(
        transport=resolved_transport,
        authority_ready=resolved_transport.flag(resolved_config.authority_ready_flag),
        dependent_ready=resolved_transport.flag(resolved_config.dependent_ready_flag),
    )
