from __future__ import annotations

import asyncio

import pytest

from connectors.transport.endpoint import Middleware
from connectors.transport.registry import InMemoryTransport
from runtime.composition_root import BringupCompositionRoot, build_composition_root
from runtime.config import OrchestratorConfig
from runtime.errors import UsageViolation, UsageViolationCode
from runtime.modules import Controller, Service, create_controller, create_service


class FakeScoreService:
    def __init__(self, events: list[str]) -> None:
        self._events = events
        self._scores: dict[str, int] = {}

    def init(self) -> None:
        self._events.append("scores.init")

    def start(self) -> None:
        self._events.append("scores.start")

    def add(self, caller: str, points: int) -> int:
        self._scores[caller] = self._scores.get(caller, 0) + points
        return self._scores[caller]

    def as_service(self) -> Service:
        return create_service("Scores", init=self.init, start=self.start, remote={"add": self.add})


def _config() -> OrchestratorConfig:
    return OrchestratorConfig(caller_id="player-1")


def test_bringup_orders_authority_before_dependent_and_publishes_state() -> None:
    events: list[str] = []
    published: list[dict[str, object]] = []
    totals: list[int] = []

    async def hud_init() -> None:
        events.append("hud.init")

    async def hud_start() -> None:
        events.append("hud.start")

    root = build_composition_root(
        [FakeScoreService(events).as_service()],
        [create_controller("Hud", init=hud_init, start=hud_start)],
        config=_config(),
        transport=InMemoryTransport(),
        health_publisher=lambda state: published.append(state.to_payload()),
    )

    async def _run() -> dict[str, float]:
        elapsed = await root.start()
        totals.append(await root.dependent.service("Scores").add(5))
        await asyncio.sleep(0)
        return elapsed

    elapsed = asyncio.run(_run())

    assert set(elapsed) == {"authority", "dependent"}
    assert events.index("scores.init") < events.index("hud.init")
    assert "scores.start" in events and "hud.start" in events
    assert totals == [5]
    assert root.state.authority_started is True
    assert root.state.dependent_started is True
    assert published[-1] == {
        "readiness": {"authority": True, "dependent": True},
        "authority": {"initializing": 1, "initialized": 1},
        "dependent": {"discovered": 1, "initializing": 1, "initialized": 1},
        "last_error": None,
    }


def test_bringup_applies_default_middleware_to_services_without_their_own() -> None:
    root = build_composition_root(
        [create_service("Echo", remote={"echo": lambda caller, value: value})],
        [],
        config=_config(),
        transport=InMemoryTransport(),
        default_middleware=Middleware(outbound=[lambda caller, result: [caller, result]]),
    )

    async def _run() -> object:
        await root.start()
        return await root.dependent.service("Echo").echo("hi")

    assert asyncio.run(_run()) == ["player-1", "hi"]


def test_bringup_records_last_error_when_a_side_fails_to_start() -> None:
    published: list[dict[str, object]] = []
    transport = InMemoryTransport()
    root = build_composition_root(
        [Service(name="Data")],
        [Controller(name="Ui")],
        config=_config(),
        transport=transport,
        health_publisher=lambda state: published.append(state.to_payload()),
    )

    async def _run() -> None:
        await root.authority.start()
        await root.start()

    with pytest.raises(UsageViolation) as excinfo:
        asyncio.run(_run())

    assert excinfo.value.code == UsageViolationCode.ALREADY_STARTED
    assert root.state.last_error is not None
    assert "already started" in root.state.last_error
    assert published[-1]["last_error"] == root.state.last_error


def test_composition_root_accepts_prebuilt_orchestrators() -> None:
    transport = InMemoryTransport()
    prebuilt = build_composition_root([], [], config=_config(), transport=transport)
    root = BringupCompositionRoot(authority=prebuilt.authority, dependent=prebuilt.dependent)

    asyncio.run(root.start())

    assert root.state.to_payload()["readiness"] == {"authority": True, "dependent": True}
    assert transport.flag("authority_started").is_set() is True
    assert transport.flag("dependent_started").is_set() is True


def test_roots_built_without_a_transport_do_not_share_readiness() -> None:
    def build() -> BringupCompositionRoot:
        return build_composition_root(
            [FakeScoreService([]).as_service()],
            [Controller(name="Hud")],
            config=_config(),
        )

    first = build()
    asyncio.run(first.start())
    second = build()

    assert first.authority.started() is True
    assert second.authority.started() is False
    assert second.dependent.started() is False

    asyncio.run(second.start())

    assert second.state.to_payload()["readiness"] == {"authority": True, "dependent": True}
