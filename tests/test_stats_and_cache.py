from __future__ import annotations

import pytest

from depth_stream.application.sinks import CacheSink
from depth_stream.common.metrics import StatsReporter, StreamStats
from depth_stream.infra.cache.latest_depth import LatestDepthCache
from tests.factory_builders import build_depth


@pytest.mark.asyncio
async def test_cache_sink_keeps_latest_per_symbol() -> None:
    cache = LatestDepthCache()
    sink = CacheSink(cache)

    await sink.accept(build_depth(mid_price="1"))
    await sink.accept(build_depth(mid_price="2"))
    await sink.accept(build_depth(symbol="@2", display="X-USDC"))

    assert len(cache) == 2
    assert sink.queue_depth() == 2
    latest = cache.get("@1")
    assert latest is not None and latest.mid_price == "2"
    assert set(cache.snapshot()) == {"@1", "@2"}


def test_cache_snapshot_is_read_only_copy() -> None:
    cache = LatestDepthCache()
    cache.update(build_depth())
    snapshot = cache.snapshot()

    cache.update(build_depth(symbol="@2"))

    assert "@2" not in snapshot
    with pytest.raises(TypeError):
        snapshot["@3"] = build_depth()  # type: ignore[index]


@pytest.mark.asyncio
async def test_stats_reporter_snapshot() -> None:
    stats = StreamStats()
    for _ in range(3):
        stats.record_processed()
    stats.record_update("A-USDC")
    stats.record_update("A-USDC")
    stats.record_update("B-USDC")
    stats.record_failure()

    reporter = StatsReporter(stats, total_symbols=4, queue_depth=lambda: 7)
    snap = await reporter.report()

    assert snap.updated_symbols == 2
    assert snap.total_symbols == 4
    assert snap.coverage_percent == 50.0
    assert snap.processed == 3
    assert snap.updates == 3
    assert snap.failures == 1
    assert snap.queue_depth == 7
    assert snap.messages_per_second >= 0.0


def test_stats_reporter_with_no_symbols() -> None:
    reporter = StatsReporter(StreamStats(), total_symbols=0, queue_depth=lambda: 0)
    assert reporter.snapshot().coverage_percent == 0.0


def test_rate_counts_processed_messages_including_failures() -> None:
    stats = StreamStats()
    for _ in range(4):
        stats.record_processed()
    stats.record_failure()
    stats.started_at -= 2.0

    rate = stats.rate()

    # 4건 / 약 2초 (updates=0 이어도 처리 메시지 기준)
    assert 1.0 < rate <= 2.0
