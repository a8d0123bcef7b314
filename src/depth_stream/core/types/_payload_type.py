from __future__ import annotations

from enum import Enum
from typing import Any, Literal, TypeAlias, TypedDict


class ConnectionState(str, Enum):
    """연결 관리자 상태

    DISCONNECTED → CONNECTING → SUBSCRIBING → STREAMING → DISCONNECTED (순환)
    SHUTTING_DOWN 은 어느 상태에서든 종료 신호로 진입하는 종단 상태입니다.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"
    SHUTTING_DOWN = "shutting_down"


class SinkMode(str, Enum):
    """깊이 레코드 처리 모드

    - MEMORY: 최신값 캐시에 덮어쓰기 (mode A)
    - SAVE: 파일 저장 스케줄러로 전달 (mode B)
    """

    MEMORY = "memory"
    SAVE = "save"


class SubscribeRequest(TypedDict):
    """구독 요청 프레임"""

    method: Literal["subscribe"]
    subscription: dict[str, str]


BookSide: TypeAlias = Literal["BID", "ASK"]
SocketMessage: TypeAlias = dict[str, Any]
