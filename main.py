"""애플리케이션 진입점 (DI Container 기반)

Hyperliquid 현물 L2 오더북 실시간 수집기
- spotMeta 로 현물 페어 목록/표시 이름 구성
- l2Book 웹소켓 스트림 → 깊이 레코드 변환
- APP_MODE=save: 심볼별 JSON/CSV/요약 파일 저장, APP_MODE=memory: 최신값 캐시

Usage:
    python main.py                   # 파일 저장 모드
    APP_MODE=memory python main.py   # 메모리 캐시 모드
"""

from __future__ import annotations

import asyncio
import signal
import sys
from functools import partial

from depth_stream.common.exceptions import DepthStreamException
from depth_stream.common.logger import PipelineLogger
from depth_stream.common.metrics import StatsReporter
from depth_stream.config.containers import ApplicationContainer
from depth_stream.config.settings import (
    app_settings,
    hyperliquid_settings,
    persistence_settings,
    timer_settings,
)
from depth_stream.core.connection.manager import DepthStreamManager
from depth_stream.core.transform.snapshot import transform_snapshot
from depth_stream.core.types import SinkMode
from depth_stream.infra.market.symbol_directory import SymbolDirectory, load_symbol_directory

logger = PipelineLogger.get_logger("main", "app")


class Application:
    """애플리케이션 메인 클래스

    책임:
    - DI Container 관리
    - 심볼 디렉토리/중간가 초기 로드
    - 연결 관리자 + 주기 작업 실행
    - Graceful Shutdown (저장 작업 drain)
    """

    def __init__(self, container: ApplicationContainer | None = None) -> None:
        self.container = container or ApplicationContainer()
        self.directory: SymbolDirectory | None = None
        self.manager: DepthStreamManager | None = None
        self.reporter: StatsReporter | None = None
        self._signal_tasks: set[asyncio.Task] = set()

    async def initialize(self) -> None:
        """애플리케이션 초기화

        Flow:
        1. 설정 주입 (처리 모드)
        2. 현물 메타데이터 로드 (0개면 치명적 오류)
        3. 초기 중간가 로드 (실패해도 계속)
        4. 연결 관리자 생성
        """
        self.container.config.from_dict({"mode": app_settings.mode.value})
        logger.info(f"🚀 실시간 현물 오더북 수집기 시작 (mode={app_settings.mode.value})")

        if app_settings.mode is SinkMode.SAVE:
            await asyncio.to_thread(app_settings.output_dir.mkdir, parents=True, exist_ok=True)
            logger.info(f"📁 저장 경로: {app_settings.output_dir.resolve()}")

        info_client = self.container.infra.info_client()
        logger.info("📊 현물 메타데이터 로드 중...")
        self.directory = await load_symbol_directory(
            info_client, spot_prefix=hyperliquid_settings.spot_prefix
        )

        refresher = self.container.infra.mid_price_refresher()
        logger.info("💰 중간가 데이터 로드 중...")
        if await refresher.refresh_once():
            logger.info(f"✅ 중간가 로드 완료 ({len(refresher.cache)}개)")

        transform = partial(
            transform_snapshot,
            display_names=self.directory.display_names,
            mid_prices=refresher.cache,
            top_n=persistence_settings.top_n,
        )
        self.manager = self.container.manager(symbols=self.directory.symbols, transform=transform)
        self.reporter = StatsReporter(
            self.manager.stats, len(self.directory), self.manager.sink.queue_depth
        )

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                # 시그널 핸들러를 지원하지 않는 플랫폼 (KeyboardInterrupt 로 처리)
                logger.warning(f"{sig.name} 핸들러 등록 불가")

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info(f"🛑 종료 신호({sig.name}) 받음. 대기 중인 작업 완료 후 종료...")
        if self.manager is None:
            return
        task = asyncio.create_task(self.manager.request_stop(sig.name))
        self._signal_tasks.add(task)
        task.add_done_callback(self._signal_tasks.discard)

    async def run(self) -> None:
        """스트림 실행 (종료 신호까지 반환하지 않음)"""
        if self.manager is None or self.reporter is None:
            raise RuntimeError("initialize() must be called before run()")

        self._install_signal_handlers()

        refresher = self.container.infra.mid_price_refresher()
        self.manager.start_timer(
            "mid_price", timer_settings.mid_price_interval, refresher.refresh_once
        )
        self.manager.start_timer("stats", timer_settings.stats_interval, self.reporter.report)

        await self.manager.run()

    async def shutdown(self) -> None:
        """Graceful Shutdown

        Flow:
        1. 연결 관리자 종료 요청 (이미 종료되었으면 무시)
        2. 통계 최종 출력
        3. info 클라이언트 세션 종료
        """
        logger.info("정리 작업 시작...")

        if self.manager is not None and not self.manager.stop_requested:
            await self.manager.request_stop("shutdown")

        if self._signal_tasks:
            await asyncio.gather(*self._signal_tasks, return_exceptions=True)

        if self.reporter is not None:
            await self.reporter.report()

        await self.container.infra.info_client().close()
        logger.info("✅ 모든 작업 완료. 프로그램 종료.")


async def main(container: ApplicationContainer | None = None) -> int:
    """메인 실행 함수. 프로세스 종료 코드 반환"""
    app = Application(container)

    try:
        await app.initialize()
        await app.run()
    except DepthStreamException as e:
        logger.critical(f"💥 치명적 오류: {e}", **e.to_dict())
        return 1
    finally:
        await app.shutdown()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n프로그램이 종료되었습니다.")
