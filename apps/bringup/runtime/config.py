"""Configuration model for the orchestrators."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import getenv

from connectors.transport.config import TransportConfig


@dataclass(frozen=True)
class OrchestratorConfig:
    """Centralized orchestrator configuration."""

    caller_id: str = "local"
    slow_init_warning_seconds: float = 5.0
    transport: TransportConfig = field(default_factory=TransportConfig)

    @classmethod
    def from_env(cls) -> "OrchestratorConfig":
        """Build config from environment variables."""

        return cls(
            caller_id=getenv("BRINGUP_CALLER_ID", "local"),
            slow_init_warning_seconds=float(getenv("BRINGUP_SLOW_INIT_WARNING_SECONDS", "5.0")),
            transport=TransportConfig.from_env(),
        )
