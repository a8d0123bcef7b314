"""스트림 처리 통계 + 주기 리포터.

메시지마다 호출되는 경로이므로 카운터 갱신은 정수 증가/집합 추가만 수행합니다.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from depth_stream.common.logger import PipelineLogger

logger = PipelineLogger.get_logger("stream_stats", "metrics")

QueueDepthProbe = Callable[[], int]


@dataclass(slots=True)
class StreamStats:
    """연결 관리자 카운터.

    Attributes:
        processed: 채널/심볼이 일치한 메시지 수
        updates: 변환 성공 수
        failures: 변환 실패 수
        connect_attempts: 연결 시도 수
        updated_symbols: 한 번이라도 갱신된 표시 심볼
    """

    processed: int = 0
    updates: int = 0
    failures: int = 0
    connect_attempts: int = 0
    updated_symbols: set[str] = field(default_factory=set)
    started_at: float = field(default_factory=time.monotonic)

    def record_processed(self) -> None:
        self.processed += 1

    def record_update(self, display_symbol: str) -> None:
        self.updates += 1
        self.updated_symbols.add(display_symbol)

    def record_failure(self) -> None:
        self.failures += 1

    def record_connect_attempt(self) -> None:
        self.connect_attempts += 1

    def elapsed(self) -> float:
        return max(time.monotonic() - self.started_at, 0.0)

    def rate(self) -> float:
        """초당 처리 메시지 수 (변환 실패 포함, 기동 이후 평균)"""
        elapsed = self.elapsed()
        return self.processed / elapsed if elapsed > 0 else 0.0


@dataclass(slots=True, frozen=True)
class StatsSnapshot:
    updated_symbols: int
    total_symbols: int
    coverage_percent: float
    processed: int
    updates: int
    failures: int
    messages_per_second: float
    queue_depth: int


class StatsReporter:
    """주기 통계 리포터 (갱신 심볼 비율, 처리량, 큐 깊이)"""

    def __init__(
        self,
        stats: StreamStats,
        total_symbols: int,
        queue_depth: QueueDepthProbe,
    ) -> None:
        self._stats = stats
        self._total_symbols = total_symbols
        self._queue_depth = queue_depth

    def snapshot(self) -> StatsSnapshot:
        stats = self._stats
        updated = len(stats.updated_symbols)
        coverage = (updated / self._total_symbols * 100) if self._total_symbols else 0.0
        return StatsSnapshot(
            updated_symbols=updated,
            total_symbols=self._total_symbols,
            coverage_percent=coverage,
            processed=stats.processed,
            updates=stats.updates,
            failures=stats.failures,
            messages_per_second=stats.rate(),
            queue_depth=self._queue_depth(),
        )

    async def report(self) -> StatsSnapshot:
        snap = self.snapshot()
        await logger.ainfo(
            f"통계: 갱신 심볼 {snap.updated_symbols}/{snap.total_symbols} "
            f"({snap.coverage_percent:.1f}%), 처리 {snap.processed}건, "
            f"실패 {snap.failures}건, {snap.messages_per_second:.2f} msg/s, "
            f"대기 작업 {snap.queue_depth}",
            updated_symbols=snap.updated_symbols,
            total_symbols=snap.total_symbols,
            processed=snap.processed,
            queue_depth=snap.queue_depth,
        )
        return snap
