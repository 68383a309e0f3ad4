"""Authority-side orchestrator: owns services and publishes their remote surfaces."""

from __future__ import annotations

from connectors.transport.endpoint import Middleware, RemoteEndpoint
from connectors.transport.flags import BoundaryFlag
from connectors.transport.interfaces import Transport

from .config import OrchestratorConfig
from .modules import Service
from .orchestrator import ModuleOrchestrator


class AuthorityOrchestrator(ModuleOrchestrator[Service]):
    """Initializes services and publishes each remote surface before flipping readiness.

    ``default_middleware`` applies to services that declare none of their own.
    """

    side = "authority"
    module_type = Service

    def __init__(
        self,
        *,
        transport: Transport,
        config: OrchestratorConfig | None = None,
        readiness: BoundaryFlag | None = None,
        default_middleware: Middleware | None = None,
    ) -> None:
        resolved_config = config or OrchestratorConfig()
        super().__init__(
            readiness=readiness or BoundaryFlag(resolved_config.transport.authority_ready_flag),
            config=resolved_config,
        )
        self._transport = transport
        self._default_middleware = default_middleware

    def _claim_announcement(self) -> BoundaryFlag:
        return self._transport.claim_flag(self._config.transport.authority_ready_flag)

    def service(self, name: str) -> Service:
        return self._lookup(name, kind="service")

    async def _after_init(self, module: Service) -> None:
        if not module.remote:
            return
        endpoint = RemoteEndpoint(module.name, module.middleware or self._default_middleware)
        for member_name, member in module.remote.items():
            endpoint.add_member(member_name, member)
        self._transport.publish(self._config.transport.service_namespace, module.name, endpoint)
