"""트라이/캐치 블록에서 사용할 예외 분류 타입 정의 모듈.

광범위한 Exception 사용을 지양하고, 경계별로 의도한 예외만 명시적으로 처리하기 위해 사용합니다.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TypeAlias


class ErrorDomain(StrEnum):
    """에러 도메인 분류"""

    CONNECTION = "connection"
    PAYLOAD = "payload"
    DESERIALIZATION = "deserialization"
    PERSISTENCE = "persistence"
    FETCH = "fetch"
    STARTUP = "startup"
    UNKNOWN = "unknown"


class ErrorCode(StrEnum):
    """에러 코드 분류"""

    CONNECT_FAILED = "connect_failed"
    INVALID_SCHEMA = "invalid_schema"
    DESERIALIZATION_ERROR = "deserialization_error"
    WRITE_FAILED = "write_failed"
    FETCH_FAILED = "fetch_failed"
    EMPTY_UNIVERSE = "empty_universe"
    UNKNOWN_ERROR = "unknown_error"


# (도메인, 코드, 재시도 가능 여부)
ErrorCategory: TypeAlias = tuple[ErrorDomain, ErrorCode, bool]
