"""Two-sided module bring-up: orchestrators, module model and composition root."""

from .authority import AuthorityOrchestrator
from .composition_root import BringupCompositionRoot, LifecycleState, build_composition_root
from .config import OrchestratorConfig
from .context import ModuleContextFilter, current_module_name
from .dependent import DependentOrchestrator
from .errors import UsageViolation, UsageViolationCode
from .loader import collect_modules
from .modules import Controller, Module, Service, create_controller, create_service
from .orchestrator import ModuleOrchestrator

__all__ = [
    "AuthorityOrchestrator",
    "BringupCompositionRoot",
    "Controller",
    "DependentOrchestrator",
    "LifecycleState",
    "Module",
    "ModuleContextFilter",
    "ModuleOrchestrator",
    "OrchestratorConfig",
    "Service",
    "UsageViolation",
    "UsageViolationCode",
    "build_composition_root",
    "collect_modules",
    "create_controller",
    "create_service",
    "current_module_name",
]
