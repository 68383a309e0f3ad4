from __future__ import annotations

import asyncio

import pytest

from connectors.transport.bus import Signal
from connectors.transport.config import TransportConfig
from connectors.transport.dependencies import build_transport_dependencies
from connectors.transport.endpoint import RemoteEndpoint
from connectors.transport.errors import TransportError, TransportErrorCode
from connectors.transport.flags import BoundaryFlag
from connectors.transport.registry import InMemoryTransport, get_shared_transport


def test_publish_seals_endpoint_and_discover_returns_copy() -> None:
    transport = InMemoryTransport()
    endpoint = RemoteEndpoint("Points")
    endpoint.add_member("get", lambda caller: 0)

    transport.publish("service", "Points", endpoint)
    discovered = transport.discover_all("service")
    discovered.clear()

    assert endpoint.sealed is True
    assert transport.discover_all("service") == {"Points": endpoint}
    assert transport.discover_all("other") == {}


def test_publish_rejects_duplicate_name_within_namespace() -> None:
    transport = InMemoryTransport()
    transport.publish("service", "Points", RemoteEndpoint("Points"))
    transport.publish("controller", "Points", RemoteEndpoint("Points"))

    with pytest.raises(TransportError) as excinfo:
        transport.publish("service", "Points", RemoteEndpoint("Points"))

    assert excinfo.value.code == TransportErrorCode.DUPLICATE_ENDPOINT


def test_flags_are_shared_by_name_and_set_once() -> None:
    transport = InMemoryTransport()
    flag = transport.flag("ready")
    changes: list[bool] = []
    flag.changed.subscribe(changes.append)

    assert transport.flag("ready") is flag
    assert flag.is_set() is False
    flag.mark_set()

    assert flag.is_set() is True
    assert changes == [True]
    assert flag.snapshot()["set"] is True
    assert flag.snapshot()["set_at"].endswith("Z")
    with pytest.raises(TransportError) as excinfo:
        flag.mark_set()
    assert excinfo.value.code == TransportErrorCode.FLAG_ALREADY_SET


def test_flag_wakes_every_waiter_once_set() -> None:
    flag = BoundaryFlag("ready")

    async def _run() -> list[float]:
        waiters = [asyncio.create_task(flag.wait()) for _ in range(3)]
        await asyncio.sleep(0)
        assert not any(waiter.done() for waiter in waiters)
        flag.mark_set()
        return list(await asyncio.gather(*waiters))

    durations = asyncio.run(_run())

    assert len(durations) == 3
    assert all(duration >= 0 for duration in durations)
    assert asyncio.run(flag.wait()) == 0.0


def test_signal_emits_to_snapshot_of_subscribers() -> None:
    signal: Signal[str] = Signal("test")
    received: list[str] = []
    late: list[str] = []

    def first(payload: str) -> None:
        received.append(f"first:{payload}")
        signal.subscribe(late.append)
        second_connection.disconnect()

    signal.subscribe(first)
    second_connection = signal.subscribe(lambda payload: received.append(f"second:{payload}"))

    signal.emit("a")
    signal.emit("b")

    assert received == ["first:a", "first:b"]
    assert late == ["b"]
    second_connection.disconnect()
    assert second_connection.connected is False


def test_signal_disconnect_all_clears_subscribers() -> None:
    signal: Signal[int] = Signal()
    connections = [signal.subscribe(lambda _: None) for _ in range(2)]

    signal.disconnect_all()

    assert signal.subscriber_count == 0
    assert all(not connection.connected for connection in connections)


def test_shared_transport_is_process_wide() -> None:
    assert get_shared_transport() is get_shared_transport()


def test_build_transport_dependencies_resolves_configured_flags() -> None:
    transport = InMemoryTransport()
    config = TransportConfig(authority_ready_flag="a_ready", dependent_ready_flag="d_ready")

    dependencies = build_transport_dependencies(config, transport)

    assert dependencies.transport is transport
    assert dependencies.authority_ready is transport.flag("a_ready")
    assert dependencies.dependent_ready is transport.flag("d_ready")


def test_transport_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRINGUP_SERVICE_NAMESPACE", "svc")
    monkeypatch.delenv("BRINGUP_AUTHORITY_READY_FLAG", raising=False)

    config = TransportConfig.from_env()

    assert config.service_namespace == "svc"
    assert config.authority_ready_flag == "authority_started"


def test_flag_has_a_single_writer() -> None:
    transport = InMemoryTransport()
    reader = transport.flag("ready")

    writer = transport.claim_flag("ready")
    with pytest.raises(TransportError) as excinfo:
        transport.claim_flag("ready")

    assert writer is reader
    assert excinfo.value.code == TransportErrorCode.FLAG_ALREADY_CLAIMED
    assert transport.claim_flag("other").is_set() is False


def test_flag_can_be_awaited_again_from_a_later_event_loop() -> None:
    flag = get_shared_transport().flag("reused_across_loops")

    for _ in range(2):
        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(asyncio.wait_for(flag.wait(), 0.01))

    async def _run() -> float:
        waiter = asyncio.create_task(flag.wait())
        await asyncio.sleep(0)
        flag.mark_set()
        return await waiter

    assert asyncio.run(_run()) >= 0
    assert asyncio.run(flag.wait()) == 0.0
