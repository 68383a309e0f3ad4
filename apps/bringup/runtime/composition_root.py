"""Bring-up composition root: wires both sides and tracks lifecycle state."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from connectors.transport.dependencies import build_transport_dependencies
from connectors.transport.endpoint import Middleware
from connectors.transport.interfaces import Transport
from connectors.transport.proxy import ServiceProxy
from connectors.transport.registry import InMemoryTransport

from .authority import AuthorityOrchestrator
from .config import OrchestratorConfig
from .dependent import DependentOrchestrator
from .modules import Controller, Service

HealthPublisher = Callable[["LifecycleState"], None]


@dataclass(slots=True)
class LifecycleState:
    authority_initializing: int = 0
    authority_initialized: int = 0
    authority_started: bool = False
    dependent_discovered: int = 0
    dependent_initializing: int = 0
    dependent_initialized: int = 0
    dependent_started: bool = False
    last_error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "readiness": {
                "authority": self.authority_started,
                "dependent": self.dependent_started,
            },
            "authority": {
                "initializing": self.authority_initializing,
                "initialized": self.authority_initialized,
            },
            "dependent": {
                "discovered": self.dependent_discovered,
                "initializing": self.dependent_initializing,
                "initialized": self.dependent_initialized,
            },
            "last_error": self.last_error,
        }


def _discard_state(_: LifecycleState) -> None:
    return None


@dataclass(slots=True)
class BringupCompositionRoot:
    """Starts the authority and dependent orchestrators and publishes their progress."""

    authority: AuthorityOrchestrator
    dependent: DependentOrchestrator
    health_publisher: HealthPublisher = _discard_state

    _state: LifecycleState = field(default_factory=LifecycleState, init=False)

    def __post_init__(self) -> None:
        self.authority.on_initializing.subscribe(self._on_authority_initializing)
        self.authority.on_initialized.subscribe(self._on_authority_initialized)
        self.authority.readiness.changed.subscribe(self._on_authority_started)
        self.dependent.on_discovered.subscribe(self._on_dependent_discovered)
        self.dependent.on_initializing.subscribe(self._on_dependent_initializing)
        self.dependent.on_initialized.subscribe(self._on_dependent_initialized)
        self.dependent.readiness.changed.subscribe(self._on_dependent_started)

    @property
    def state(self) -> LifecycleState:
        return self._state

    async def start(self) -> dict[str, float]:
        """Start both sides concurrently; the dependent blocks until the authority is ready."""

        try:
            authority_elapsed, dependent_elapsed = await asyncio.gather(
                self.authority.start(),
                self.dependent.start(),
            )
        except Exception as exc:  # noqa: BLE001
            self._state.last_error = str(exc)
            self._publish()
            raise
        return {"authority": authority_elapsed, "dependent": dependent_elapsed}

    def _on_authority_initializing(self, _: Service) -> None:
        self._state.authority_initializing += 1
        self._publish()

    def _on_authority_initialized(self, _: Service) -> None:
        self._state.authority_initialized += 1
        self._publish()

    def _on_authority_started(self, _: bool) -> None:
        self._state.authority_started = True
        self._publish()

    def _on_dependent_discovered(self, services: Mapping[str, ServiceProxy]) -> None:
        self._state.dependent_discovered = len(services)
        self._publish()

    def _on_dependent_initializing(self, _: Controller) -> None:
        self._state.dependent_initializing += 1
        self._publish()

    def _on_dependent_initialized(self, _: Controller) -> None:
        self._state.dependent_initialized += 1
        self._publish()

    def _on_dependent_started(self, _: bool) -> None:
        self._state.dependent_started = True
        self._publish()

    def _publish(self) -> None:
        self.health_publisher(self._state)


def build_composition_root(
    services: Iterable[Service] | Mapping[str, Service],
    controllers: Iterable[Controller] | Mapping[str, Controller],
    *,
    config: OrchestratorConfig | None = None,
    transport: Transport | None = None,
    health_publisher: HealthPublisher | None = None,
    default_middleware: Middleware | None = None,
) -> BringupCompositionRoot:
    """Build both orchestrators over one transport and register their modules.

    Without ``transport`` the root gets a private ``InMemoryTransport``, so
    building several roots in one process never shares readiness flags.
    """

    resolved_config = config or OrchestratorConfig.from_env()
    dependencies = build_transport_dependencies(resolved_config.transport, transport or InMemoryTransport())

    authority = AuthorityOrchestrator(
        transport=dependencies.transport,
        config=resolved_config,
        default_middleware=default_middleware,
    )
    dependent = DependentOrchestrator(
        transport=dependencies.transport,
        config=resolved_config,
        authority_ready=authority.readiness,
    )
    authority.register_modules(services)
    dependent.register_modules(controllers)

    return BringupCompositionRoot(
        authority=authority,
        dependent=dependent,
        health_publisher=health_publisher or _discard_state,
    )
