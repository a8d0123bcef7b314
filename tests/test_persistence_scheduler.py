from __future__ import annotations

import asyncio

import pytest

from depth_stream.application.sinks import PersistenceSink
from depth_stream.core.dto.internal.depth import SymbolDepthDomain
from depth_stream.infra.storage.scheduler import PersistenceScheduler
from tests.factory_builders import build_depth


class _SlowWriter:
    def __init__(self, delay: float = 0.01) -> None:
        self.delay = delay
        self.active = 0
        self.peak = 0
        self.written: list[str] = []

    async def __call__(self, depth: SymbolDepthDomain) -> None:
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            self.written.append(depth.canonical_symbol)
        finally:
            self.active -= 1


class _GatedWriter:
    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.written = 0

    async def __call__(self, depth: SymbolDepthDomain) -> None:
        await self.gate.wait()
        self.written += 1


@pytest.mark.asyncio
async def test_backpressure_bounds_in_flight_tasks() -> None:
    writer = _SlowWriter()
    scheduler = PersistenceScheduler(writer, high_water_mark=100)
    sink = PersistenceSink(scheduler)

    observed: list[int] = []
    for i in range(150):
        await sink.accept(build_depth(symbol=f"@{i}", display=f"T{i}-USDC"))
        observed.append(scheduler.in_flight)

    assert max(observed) <= 100
    assert writer.peak <= 101

    assert await scheduler.drain() > 0
    assert scheduler.in_flight == 0
    assert scheduler.submitted == 150
    assert scheduler.completed == 150
    assert len(writer.written) == 150


@pytest.mark.asyncio
async def test_submit_does_not_wait_for_write() -> None:
    writer = _GatedWriter()
    scheduler = PersistenceScheduler(writer)

    task = scheduler.submit(build_depth())

    assert scheduler.in_flight == 1
    assert not task.done()
    writer.gate.set()
    await scheduler.drain()
    assert writer.written == 1


@pytest.mark.asyncio
async def test_drain_waits_for_all_in_flight_writes() -> None:
    writer = _GatedWriter()
    scheduler = PersistenceScheduler(writer)
    for i in range(20):
        scheduler.submit(build_depth(symbol=f"@{i}"))

    drain_task = asyncio.create_task(scheduler.aclose())
    await asyncio.sleep(0)
    assert not drain_task.done()

    writer.gate.set()
    awaited = await drain_task

    assert awaited == 20
    assert writer.written == 20
    assert scheduler.in_flight == 0


class _PerSymbolGatedWriter:
    def __init__(self, *symbols: str) -> None:
        self.gates = {symbol: asyncio.Event() for symbol in symbols}
        self.written: list[str] = []

    async def __call__(self, depth: SymbolDepthDomain) -> None:
        await self.gates[depth.canonical_symbol].wait()
        self.written.append(depth.canonical_symbol)


@pytest.mark.asyncio
async def test_drain_includes_tasks_registered_while_draining() -> None:
    writer = _PerSymbolGatedWriter("@1", "@2")
    scheduler = PersistenceScheduler(writer)
    scheduler.submit(build_depth(symbol="@1"))

    drain_task = asyncio.create_task(scheduler.drain())
    await asyncio.sleep(0)
    scheduler.submit(build_depth(symbol="@2"))

    writer.gates["@1"].set()
    for _ in range(5):
        await asyncio.sleep(0)
    assert not drain_task.done()

    writer.gates["@2"].set()
    await drain_task
    assert writer.written == ["@1", "@2"]
    assert scheduler.in_flight == 0


@pytest.mark.asyncio
async def test_failed_write_is_isolated() -> None:
    async def writer(depth: SymbolDepthDomain) -> None:
        if depth.canonical_symbol == "@bad":
            raise OSError("disk full")
        await asyncio.sleep(0)

    scheduler = PersistenceScheduler(writer)
    for symbol in ("@1", "@bad", "@2"):
        scheduler.submit(build_depth(symbol=symbol))

    await scheduler.drain()

    assert scheduler.failed == 1
    assert scheduler.completed == 2
    assert scheduler.in_flight == 0


def test_high_water_mark_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PersistenceScheduler(_SlowWriter(), high_water_mark=0)
