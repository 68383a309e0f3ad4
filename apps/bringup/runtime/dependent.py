"""Dependent-side orchestrator: waits on the authority, discovers services, runs controllers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from connectors.transport.bus import Signal
from connectors.transport.flags import BoundaryFlag
from connectors.transport.interfaces import Transport
from connectors.transport.proxy import ServiceProxy

from .config import OrchestratorConfig
from .errors import UsageViolation, UsageViolationCode
from .modules import Controller
from .orchestrator import ModuleOrchestrator

logger = logging.getLogger(__name__)


class DependentOrchestrator(ModuleOrchestrator[Controller]):
    side = "dependent"
    module_type = Controller

    def __init__(
        self,
        *,
        transport: Transport,
        config: OrchestratorConfig | None = None,
        readiness: BoundaryFlag | None = None,
        authority_ready: BoundaryFlag | None = None,
    ) -> None:
        resolved_config = config or OrchestratorConfig()
        super().__init__(
            readiness=readiness or BoundaryFlag(resolved_config.transport.dependent_ready_flag),
            config=resolved_config,
        )
        self._transport = transport
        self._authority_ready = authority_ready or transport.flag(resolved_config.transport.authority_ready_flag)
        self._services: dict[str, ServiceProxy] | None = None
        self.on_discovered: Signal[Mapping[str, ServiceProxy]] = Signal(f"{self.side}.discovered")

    @property
    def discovered(self) -> bool:
        return self._services is not None

    async def discover(self) -> Mapping[str, ServiceProxy]:
        """Wait for the authority to start, then map every published service.

        Runs once; later calls return the same mapping.
        """

        if self._services is None:
            waited = await self._authority_ready.wait()
            if self._services is None:
                namespace = self._config.transport.service_namespace
                endpoints = self._transport.discover_all(namespace)
                self._services = {
                    name: ServiceProxy(endpoint, self._config.caller_id) for name, endpoint in endpoints.items()
                }
                logger.info(
                    "bringup_services_discovered",
                    extra={
                        "event": "services_discovered",
                        "namespace": namespace,
                        "services": sorted(self._services),
                        "waited_seconds": waited,
                    },
                )
                self.on_discovered.emit(MappingProxyType(self._services))
        return MappingProxyType(self._services)

    def service(self, name: str) -> ServiceProxy:
        if self._services is None:
            raise UsageViolation(
                UsageViolationCode.NOT_DISCOVERED,
                f"cannot get service {name!r}: services have not been discovered yet",
            )
        proxy = self._services.get(name)
        if proxy is None:
            raise UsageViolation(UsageViolationCode.UNKNOWN_MODULE, f"service {name!r} does not exist")
        return proxy

    def controller(self, name: str) -> Controller:
        return self._lookup(name, kind="controller")

    def _claim_announcement(self) -> BoundaryFlag:
        return self._transport.claim_flag(self._config.transport.dependent_ready_flag)

    async def _before_init(self) -> None:
        await self.discover()
