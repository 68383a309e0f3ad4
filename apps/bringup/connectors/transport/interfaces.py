"""Interfaces the orchestrators consume from the transport."""

from __future__ import annotations

from typing import Protocol

from .endpoint import RemoteEndpoint
from .flags import BoundaryFlag


class EndpointPublisher(Protocol):
    """Makes endpoints discoverable by name under a namespace."""

    def publish(self, namespace: str, name: str, endpoint: RemoteEndpoint) -> None:
        """Publish one sealed endpoint."""


class EndpointDiscovery(Protocol):
    """Enumerates endpoints published under a namespace."""

    def discover_all(self, namespace: str) -> dict[str, RemoteEndpoint]:
        """Return every currently published (name, endpoint) pair."""


class FlagProvider(Protocol):
    """Hands out boundary flags shared by both sides."""

    def flag(self, name: str) -> BoundaryFlag:
        """Return the flag registered under ``name``, creating it on first use."""

    def claim_flag(self, name: str) -> BoundaryFlag:
        """Return the flag under ``name`` for its single writer."""


class Transport(EndpointPublisher, EndpointDiscovery, FlagProvider, Protocol):
    """Full transport surface used by the composition root."""
