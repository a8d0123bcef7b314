from __future__ import annotations

import pytest

from depth_stream.application.sinks import CacheSink, PersistenceSink
from depth_stream.config.containers import ApplicationContainer
from depth_stream.core.connection.manager import DepthStreamManager
from depth_stream.core.transform.snapshot import transform_snapshot


@pytest.mark.parametrize(("mode", "sink_type"), [("memory", CacheSink), ("save", PersistenceSink)])
def test_sink_selected_by_mode(mode: str, sink_type: type) -> None:
    container = ApplicationContainer()
    container.config.from_dict({"mode": mode})

    sink = container.sink()

    assert isinstance(sink, sink_type)
    assert container.sink() is sink


def test_manager_factory_wires_settings() -> None:
    container = ApplicationContainer()
    container.config.from_dict({"mode": "memory"})

    manager = container.manager(symbols=["@1", "@2"], transform=transform_snapshot)

    assert isinstance(manager, DepthStreamManager)
    assert manager.symbols == ("@1", "@2")
    assert manager.url == container.infra.hyperliquid_config().ws_url
    assert manager.policy.initial_backoff == container.infra.websocket_config().reconnect_delay
    assert manager.policy.backoff_multiplier == 1.0
    assert manager.stats is container.stats()


def test_scheduler_uses_file_writer_and_high_water_mark() -> None:
    container = ApplicationContainer()

    scheduler = container.infra.scheduler()

    assert scheduler.high_water_mark == container.infra.persistence_config().high_water_mark
    assert container.infra.scheduler() is scheduler
