"""Configuration model and well-known names for the transport."""

from __future__ import annotations

from dataclasses import dataclass
from os import getenv

SERVICE_NAMESPACE = "service"
AUTHORITY_READY_FLAG = "authority_started"
DEPENDENT_READY_FLAG = "dependent_started"


@dataclass(frozen=True)
class TransportConfig:
    """Namespace and flag names both sides must agree on."""

    service_namespace: str = SERVICE_NAMESPACE
    authority_ready_flag: str = AUTHORITY_READY_FLAG
    dependent_ready_flag: str = DEPENDENT_READY_FLAG

    @classmethod
    def from_env(cls) -> "TransportConfig":
        """Build config from environment variables."""

        return cls(
            service_namespace=getenv("BRINGUP_SERVICE_NAMESPACE", SERVICE_NAMESPACE),
            authority_ready_flag=getenv("BRINGUP_AUTHORITY_READY_FLAG", AUTHORITY_READY_FLAG),
            dependent_ready_flag=getenv("BRINGUP_DEPENDENT_READY_FLAG", DEPENDENT_READY_FLAG),
        )
