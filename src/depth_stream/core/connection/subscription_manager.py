from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from depth_stream.common.logger import PipelineLogger
from depth_stream.common.serde import to_text
from depth_stream.core.types import SubscribeRequest

logger = PipelineLogger.get_logger("subscription_manager", "connection")


class SubscriptionManager:
    """구독 관리 전담 클래스

    책임:
    - 심볼별 구독 메시지 생성
    - 연결마다 전체 심볼 재구독 (전송은 락으로 직렬화)
    """

    def __init__(self, channel: str) -> None:
        self.channel = channel
        self._send_lock = asyncio.Lock()

    def build_message(self, coin: str) -> SubscribeRequest:
        return {
            "method": "subscribe",
            "subscription": {"type": self.channel, "coin": coin},
        }

    async def subscribe_all(self, websocket: Any, symbols: Iterable[str]) -> int:
        """심볼마다 구독 프레임 1개 전송. 전송한 프레임 수 반환"""
        sent: list[str] = []
        async with self._send_lock:
            for coin in symbols:
                await websocket.send(to_text(self.build_message(coin)))
                sent.append(coin)

        logger.info(f"{self.channel}: 구독 요청 {len(sent)}개 전송 완료")
        return len(sent)
