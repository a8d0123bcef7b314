"""파일 저장 스케줄러 (관리되는 태스크 그룹).

- submit: 즉시 반환하는 비차단 등록 (수신 루프를 막지 않음)
- relieve: 동시 작업 수가 상한을 넘으면 하나가 끝날 때까지 대기 (거절하지 않음)
- drain: 등록된 모든 작업 완료 대기 (drain 중 등록된 작업 포함)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from depth_stream.common.exceptions.exception_rule import PERSISTENCE_EXCEPTIONS, error_log_extra
from depth_stream.common.logger import PipelineLogger
from depth_stream.core.dto.internal.depth import SymbolDepthDomain

logger = PipelineLogger.get_logger("persistence_scheduler", "storage")

DepthWriter = Callable[[SymbolDepthDomain], Awaitable[Any]]


class PersistenceScheduler:
    def __init__(self, writer: DepthWriter, high_water_mark: int = 100) -> None:
        """
        Args:
            writer: 레코드 1개를 저장하는 코루틴 함수 (DepthFileWriter.write)
            high_water_mark: 백프레셔 대기를 시작하는 동시 작업 수
        """
        if high_water_mark < 1:
            raise ValueError(f"high_water_mark must be positive: {high_water_mark}")
        self._writer = writer
        self.high_water_mark = high_water_mark
        self._in_flight: set[asyncio.Task[None]] = set()

        self.submitted = 0
        self.completed = 0
        self.failed = 0

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def submit(self, depth: SymbolDepthDomain) -> asyncio.Task[None]:
        """저장 작업 등록 (대기하지 않음)"""
        task = asyncio.create_task(self._run(depth), name=f"persist:{depth.canonical_symbol}")
        self._in_flight.add(task)
        # 완료 시 정확히 한 번 제거 (이벤트 루프 스레드)
        task.add_done_callback(self._in_flight.discard)
        self.submitted += 1
        return task

    async def _run(self, depth: SymbolDepthDomain) -> None:
        try:
            await self._writer(depth)
        except PERSISTENCE_EXCEPTIONS as e:
            self.failed += 1
            logger.error(
                f"✗ {depth.display_symbol} 파일 저장 실패: {e}",
                **error_log_extra(e, "persistence", symbol=depth.display_symbol),
            )
        except Exception as e:
            self.failed += 1
            logger.error(
                f"✗ {depth.display_symbol} 파일 저장 중 예기치 못한 오류: {e}",
                exc_info=True,
                **error_log_extra(e, "persistence", symbol=depth.display_symbol),
            )
        else:
            self.completed += 1

    async def relieve(self) -> None:
        """상한 초과 시 작업 하나 이상이 끝날 때까지 대기"""
        while len(self._in_flight) > self.high_water_mark:
            await asyncio.wait(set(self._in_flight), return_when=asyncio.FIRST_COMPLETED)
            # done-callback 이 실행될 기회를 준다
            await asyncio.sleep(0)

    async def drain(self) -> int:
        """등록된 모든 작업 완료 대기. 대기한 작업 수 반환"""
        awaited = 0
        while self._in_flight:
            pending = list(self._in_flight)
            awaited += len(pending)
            await asyncio.gather(*pending, return_exceptions=True)
            # 완료 콜백 반영
            await asyncio.sleep(0)
            self._in_flight.difference_update(task for task in pending if task.done())
        return awaited

    async def aclose(self) -> int:
        pending = self.in_flight
        if pending:
            logger.info(f"대기 중인 저장 작업 {pending}개 완료 대기...")
        awaited = await self.drain()
        logger.info(
            f"저장 스케줄러 종료 (submitted={self.submitted}, "
            f"completed={self.completed}, failed={self.failed})"
        )
        return awaited
