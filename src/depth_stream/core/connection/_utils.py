from __future__ import annotations

from typing import Any

import orjson

from depth_stream.common.logger import PipelineLogger
from depth_stream.common.serde import from_frame
from depth_stream.core.types import SocketMessage

logger = PipelineLogger.get_logger("frame_parser", "connection")


def parse_frame(raw: str | bytes | bytearray) -> SocketMessage | None:
    """소켓 프레임 → dict. JSON 이 아니거나 객체가 아니면 None"""
    try:
        message = from_frame(raw)
    except orjson.JSONDecodeError as e:
        logger.debug(f"JSON 이 아닌 프레임 폐기: {e}")
        return None

    if not isinstance(message, dict):
        return None
    return message


def match_channel(message: SocketMessage, channel: str) -> tuple[str, Any] | None:
    """채널이 일치하면 (coin, data) 반환, 아니면 None

    data 가 dict 가 아니거나 coin 이 문자열이 아니면 매칭하지 않습니다.
    """
    if message.get("channel") != channel:
        return None

    data = message.get("data")
    if not isinstance(data, dict):
        return None

    coin = data.get("coin")
    if not isinstance(coin, str):
        return None
    return coin, data
