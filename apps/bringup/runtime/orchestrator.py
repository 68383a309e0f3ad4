"""Registration and init/start protocol shared by both sides of the boundary."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, ClassVar, Generic, TypeVar

from connectors.transport.bus import Signal
from connectors.transport.flags import BoundaryFlag

from .config import OrchestratorConfig
from .context import module_context, module_scope
from .deferred import all_settled, call_hook, spawn_detached
from .errors import UsageViolation, UsageViolationCode
from .modules import Module

logger = logging.getLogger(__name__)

ModuleT = TypeVar("ModuleT", bound=Module)


class ModuleOrchestrator(Generic[ModuleT]):
    """Brings one side's modules from registered to initialized to started.

    Lifecycle: ``register_modules`` once, then ``start`` once. ``start`` runs
    every ``init`` concurrently and waits for all of them (a failing module is
    logged and left out of the ready set), sets the readiness flag, then
    dispatches every ``start`` hook on a detached task and returns the
    elapsed seconds. The flag is terminal: there is no stop or reset.

    Each instance owns its readiness flag. A side that announces itself on a
    transport claims the transport flag of the same name when ``start`` is
    called and sets it right after its own.
    """

    side: ClassVar[str] = "module"
    module_type: ClassVar[type[Module]] = Module

    def __init__(self, *, readiness: BoundaryFlag, config: OrchestratorConfig | None = None) -> None:
        self._config = config or OrchestratorConfig()
        self._readiness = readiness
        self.on_initializing: Signal[ModuleT] = Signal(f"{self.side}.initializing")
        self.on_initialized: Signal[ModuleT] = Signal(f"{self.side}.initialized")
        self._staged: dict[str, ModuleT] | None = None
        self._ready: dict[str, ModuleT] = {}
        self._failures: dict[str, BaseException] = {}
        self._start_called = False

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def readiness(self) -> BoundaryFlag:
        return self._readiness

    @property
    def modules(self) -> Mapping[str, ModuleT]:
        return MappingProxyType(self._ready)

    @property
    def failures(self) -> Mapping[str, BaseException]:
        return MappingProxyType(self._failures)

    def register_modules(self, batch: Iterable[ModuleT] | Mapping[str, ModuleT]) -> None:
        if self._start_called:
            raise UsageViolation(
                UsageViolationCode.ALREADY_STARTED,
                f"cannot register modules: {self.side} orchestrator already started",
            )
        if self._staged is not None:
            raise UsageViolation(
                UsageViolationCode.ALREADY_REGISTERED,
                f"cannot register modules: {self.side} modules were already registered",
            )
        self._staged = self._normalize_batch(batch)
        logger.info(
            "bringup_modules_registered",
            extra={"event": "modules_registered", "side": self.side, "modules": sorted(self._staged)},
        )

    def started(self) -> bool:
        return self._readiness.is_set()

    async def start(self) -> float:
        if self._start_called:
            raise UsageViolation(
                UsageViolationCode.ALREADY_STARTED,
                f"cannot start: {self.side} orchestrator already started",
            )
        self._start_called = True
        started_at = time.monotonic()
        announced = self._claim_announcement()

        await self._before_init()
        await self._init_phase()
        self._readiness.mark_set()
        if announced is not None and announced is not self._readiness:
            announced.mark_set()
        self._start_phase()

        elapsed = time.monotonic() - started_at
        logger.info(
            "bringup_orchestrator_started",
            extra={
                "event": "orchestrator_started",
                "side": self.side,
                "ready": len(self._ready),
                "failed": len(self._failures),
                "elapsed_seconds": elapsed,
            },
        )
        return elapsed

    async def on_start(self) -> float:
        """Resolve once this side has started; returns the seconds spent waiting."""

        return await self._readiness.wait()

    def _claim_announcement(self) -> BoundaryFlag | None:
        """Transport flag mirrored once this side is ready, claimed before any init runs."""

        return None

    async def _before_init(self) -> None:
        return None

    async def _after_init(self, module: ModuleT) -> None:
        return None

    async def _init_phase(self) -> None:
        if not self._staged:
            return

        loop = asyncio.get_running_loop()
        pending = list(self._staged.values())
        tasks = [loop.create_task(self._init_module(module), name=f"init:{module.name}") for module in pending]
        outcomes = await all_settled(tasks)

        for module, outcome in zip(pending, outcomes):
            if outcome.ok:
                continue
            self._staged.pop(module.name, None)
            self._failures[module.name] = outcome.error
            logger.warning(
                "bringup_module_init_failed",
                extra={
                    "event": "module_init_failed",
                    "side": self.side,
                    "module_name": module.name,
                    "error": repr(outcome.error),
                },
            )

    async def _init_module(self, module: ModuleT) -> None:
        self.on_initializing.emit(module)

        if module.init is not None:
            init_started_at = time.monotonic()
            with module_scope(module.name):
                await call_hook(module.init)
            init_elapsed = time.monotonic() - init_started_at
            if init_elapsed > self._config.slow_init_warning_seconds:
                logger.warning(
                    "bringup_module_init_slow",
                    extra={
                        "event": "module_init_slow",
                        "side": self.side,
                        "module_name": module.name,
                        "elapsed_seconds": init_elapsed,
                    },
                )

        await self._after_init(module)

        self._ready[module.name] = module
        self._staged.pop(module.name, None)
        self.on_initialized.emit(module)

    def _start_phase(self) -> None:
        for module in self._ready.values():
            if module.start is None:
                continue
            spawn_detached(module.start, name=f"start:{module.name}", context=module_context(module.name))

    def _lookup(self, name: str, *, kind: str) -> ModuleT:
        if not self.started():
            raise UsageViolation(
                UsageViolationCode.NOT_STARTED,
                f"cannot get {kind} {name!r}: {self.side} orchestrator has not started",
            )
        module = self._ready.get(name)
        if module is None:
            raise UsageViolation(UsageViolationCode.UNKNOWN_MODULE, f"{kind} {name!r} does not exist")
        return module

    def _normalize_batch(self, batch: Any) -> dict[str, ModuleT]:
        if isinstance(batch, Mapping):
            entries = [(key, module) for key, module in batch.items()]
        elif isinstance(batch, (str, bytes, Module)) or not isinstance(batch, Iterable):
            raise UsageViolation(
                UsageViolationCode.INVALID_BATCH,
                f"modules must be registered as a collection, got {type(batch).__name__}",
            )
        else:
            entries = [(None, module) for module in batch]

        staged: dict[str, ModuleT] = {}
        for key, module in entries:
            if not isinstance(module, self.module_type):
                raise UsageViolation(
                    UsageViolationCode.INVALID_MODULE,
                    f"{self.side} orchestrator accepts {self.module_type.__name__} entries, got {type(module).__name__}",
                )
            if key is not None and key != module.name:
                raise UsageViolation(
                    UsageViolationCode.INVALID_MODULE,
                    f"registration key {key!r} does not match module name {module.name!r}",
                )
            if module.name in staged:
                raise UsageViolation(
                    UsageViolationCode.DUPLICATE_MODULE,
                    f"module {module.name!r} appears more than once in the registration batch",
                )
            staged[module.name] = module
        return staged
