from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol

import websockets

from depth_stream.common.exceptions import SnapshotTransformError
from depth_stream.common.exceptions.exception_rule import SOCKET_EXCEPTIONS, error_log_extra
from depth_stream.common.logger import PipelineLogger
from depth_stream.common.metrics import StreamStats
from depth_stream.core.connection._utils import match_channel, parse_frame
from depth_stream.core.connection.services.backoff import compute_next_backoff
from depth_stream.core.connection.subscription_manager import SubscriptionManager
from depth_stream.core.dto.internal.common import ConnectionPolicyDomain, StreamScopeDomain
from depth_stream.core.dto.internal.depth import SymbolDepthDomain
from depth_stream.core.types import ConnectionState

logger = PipelineLogger.get_logger("depth_stream_manager", "connection")

DEFAULT_PING_INTERVAL = 20.0

SnapshotTransform = Callable[[str, Mapping[str, Any]], SymbolDepthDomain]
TimerCallback = Callable[[], Awaitable[Any]]


class DepthSink(Protocol):
    """변환 결과 소비자 (최신값 캐시 또는 파일 저장 스케줄러)"""

    async def accept(self, depth: SymbolDepthDomain) -> None: ...

    def queue_depth(self) -> int: ...

    async def close(self) -> None: ...


def spot_symbol_filter(prefix: str) -> Callable[[str], bool]:
    """현물 페어 판별 (접두사 일치)"""

    def _is_spot(coin: str) -> bool:
        return coin.startswith(prefix)

    return _is_spot


class DepthStreamManager:
    """l2Book 스트림 연결 관리자

    단일 수신 루프가 전송 순서대로 메시지를 처리하고,
    연결이 끊기면 고정 지연 후 재접속합니다 (재귀 없이 루프).
    """

    def __init__(
        self,
        symbols: Sequence[str],
        transform: SnapshotTransform,
        sink: DepthSink,
        *,
        url: str,
        channel: str = "l2Book",
        symbol_filter: Callable[[str], bool] | None = None,
        policy: ConnectionPolicyDomain | None = None,
        stats: StreamStats | None = None,
        ping_interval: float | None = DEFAULT_PING_INTERVAL,
    ) -> None:
        """
        Args:
            symbols: 구독할 거래소 심볼 목록
            transform: (coin, data) → SymbolDepthDomain 변환 함수
            sink: 변환 결과 소비자
            url: 웹소켓 주소
            channel: 구독/수신 채널
            symbol_filter: 처리할 심볼 판별 (기본: '@' 접두사)
            policy: 재접속 정책
            stats: 카운터 (미지정 시 새로 생성)
            ping_interval: websockets keepalive ping 주기 (None 이면 비활성)
        """
        self.symbols = tuple(symbols)
        self.url = url
        self.channel = channel
        self.policy = policy or ConnectionPolicyDomain()
        self.stats = stats or StreamStats()
        self.scope = StreamScopeDomain(url=url, channel=channel)

        self._transform = transform
        self._sink = sink
        self._symbol_filter = symbol_filter or spot_symbol_filter("@")
        self._ping_interval = ping_interval
        self._subscriptions = SubscriptionManager(channel)

        self._state = ConnectionState.DISCONNECTED
        self._websocket: Any = None

        # 실행 제어
        self._stop_requested: bool = False
        self._reconnect_task: asyncio.Task[None] | None = None
        self._timers: dict[str, asyncio.Task[None]] = {}

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def sink(self) -> DepthSink:
        return self._sink

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.info(
            f"{self.scope.to_key()}: {self._state.value} → {state.value}",
            previous_state=self._state.value,
            state=state.value,
        )
        self._state = state

    # ------------------------------------------------------------------
    # 주기 작업
    # ------------------------------------------------------------------

    def start_timer(self, name: str, interval: float, callback: TimerCallback) -> asyncio.Task[None]:
        """주기 작업 등록 (종료 시 일괄 취소)"""
        existing = self._timers.get(name)
        if existing is not None and not existing.done():
            existing.cancel()

        task = asyncio.create_task(self._timer_loop(name, interval, callback), name=f"timer:{name}")
        self._timers[name] = task
        return task

    async def _timer_loop(self, name: str, interval: float, callback: TimerCallback) -> None:
        while not self._stop_requested:
            await asyncio.sleep(interval)
            try:
                await callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"주기 작업 실패 ({name}): {e}", timer=name, exc_info=True)

    async def _cancel_timers(self) -> None:
        timers = list(self._timers.values())
        self._timers.clear()
        for task in timers:
            task.cancel()
        for task in timers:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # 수신 처리
    # ------------------------------------------------------------------

    async def _dispatch(self, raw: str | bytes) -> None:
        """메시지 1건 처리. 변환 실패는 해당 메시지만 폐기합니다."""
        message = parse_frame(raw)
        if message is None:
            return

        matched = match_channel(message, self.channel)
        if matched is None:
            return

        coin, data = matched
        if not self._symbol_filter(coin):
            return

        self.stats.record_processed()
        try:
            depth = self._transform(coin, data)
        except SnapshotTransformError as e:
            self.stats.record_failure()
            logger.warning(
                f"{coin}: 스냅샷 변환 실패, 메시지 폐기 - {e}",
                **error_log_extra(e, "transform", symbol=coin),
            )
            return

        self.stats.record_update(depth.display_symbol)
        await self._sink.accept(depth)

    async def _stream(self, websocket: Any) -> None:
        self._set_state(ConnectionState.SUBSCRIBING)
        await self._subscriptions.subscribe_all(websocket, self.symbols)

        self._set_state(ConnectionState.STREAMING)
        async for raw in websocket:
            await self._dispatch(raw)
            if self._stop_requested:
                break

    # ------------------------------------------------------------------
    # 연결 루프
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """연결/구독/수신 루프. 종료 요청 시 정리(저장 작업 drain) 후 반환합니다."""
        attempt = 0
        try:
            while not self._stop_requested:
                self._set_state(ConnectionState.CONNECTING)
                self.stats.record_connect_attempt()
                logger.info(f"연결 시도 중... {self.url} (symbols={len(self.symbols)})")
                try:
                    async with websockets.connect(
                        self.url,
                        open_timeout=self.policy.open_timeout,
                        ping_interval=self._ping_interval,
                    ) as websocket:
                        self._websocket = websocket
                        if self._stop_requested:
                            break
                        attempt = 0
                        await self._stream(websocket)
                    logger.info(f"{self.scope.to_key()}: 연결 종료")
                except asyncio.CancelledError:
                    logger.info(f"{self.scope.to_key()}: 연결 작업이 취소되었습니다.")
                    raise
                except SOCKET_EXCEPTIONS as e:
                    if self._stop_requested:
                        logger.info(f"종료 요청으로 재접속 중단 (reason: {e})")
                        break
                    logger.warning(
                        f"연결이 끊겼습니다. 재시도합니다. 이유: {e}",
                        **error_log_extra(e, "ws", url=self.url, attempt=attempt + 1),
                    )
                except Exception as e:
                    if self._stop_requested:
                        break
                    logger.error(
                        f"unexpected error in connection loop - {e}",
                        exc_info=True,
                        **error_log_extra(e, "ws", url=self.url, attempt=attempt + 1),
                    )
                finally:
                    self._websocket = None

                if self._stop_requested:
                    break

                self._set_state(ConnectionState.DISCONNECTED)
                attempt += 1
                limit = self.policy.max_reconnect_attempts
                if limit and attempt > limit:
                    logger.error(f"재접속 한도({limit}) 초과로 종료")
                    break

                delay = compute_next_backoff(self.policy, attempt - 1)
                logger.info(f"{delay:.2f}s 후 재접속 (attempt={attempt})")
                self._reconnect_task = asyncio.create_task(asyncio.sleep(delay))
                try:
                    await self._reconnect_task
                except asyncio.CancelledError:
                    if self._stop_requested:
                        logger.info("재접속 대기 중단")
                        break
                    raise
                finally:
                    self._reconnect_task = None
        finally:
            await self._shutdown()

    async def request_stop(self, reason: str | None = None) -> None:
        """외부 신호로 스트림을 중단합니다. 정리는 run() 이 완료합니다."""
        if self._stop_requested:
            return

        self._stop_requested = True
        reason_suffix = f" (reason: {reason})" if reason else ""
        logger.info(f"{self.scope.to_key()}: stop requested{reason_suffix}")
        self._set_state(ConnectionState.SHUTTING_DOWN)

        reconnect_task = self._reconnect_task
        if reconnect_task is not None and not reconnect_task.done():
            reconnect_task.cancel()

        await self._cancel_timers()

        websocket = self._websocket
        if websocket is not None:
            try:
                await websocket.close()
            except Exception as close_error:
                logger.warning(f"종료 중 websocket close 실패 - {close_error}")

    async def _shutdown(self) -> None:
        self._stop_requested = True
        self._set_state(ConnectionState.SHUTTING_DOWN)
        await self._cancel_timers()
        await self._sink.close()
        logger.info(
            f"{self.scope.to_key()}: 종료 완료 "
            f"(processed={self.stats.processed}, updates={self.stats.updates}, "
            f"failures={self.stats.failures})"
        )
