from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from depth_stream.core.types import ErrorCode, ErrorDomain


@dataclass(slots=True, eq=False)
class DepthStreamException(Exception):
    """수집기 도메인 기본 예외 클래스

    운영/관측 판단을 위한 구조화 필드를 포함하며, `to_dict()`는
    로그 extra 직렬화 시 일관된 스키마를 제공합니다.
    """

    symbol: str
    message: str
    original_exception: Exception | None = None

    error_domain: ErrorDomain = ErrorDomain.UNKNOWN
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    retryable: bool = False

    def __str__(self) -> str:
        if self.original_exception is not None:
            return f"{self.symbol}: {self.message} ({self.original_exception})"
        return f"{self.symbol}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 로그 extra로 변환"""
        result: dict[str, Any] = {
            "symbol": self.symbol,
            "error": self.message,
            "error_type": self.__class__.__name__,
            "error_domain": self.error_domain.value,
            "error_code": self.error_code.value,
            "retryable": self.retryable,
        }

        if self.original_exception:
            result["original_error"] = str(self.original_exception)
            result["original_error_type"] = self.original_exception.__class__.__name__

        return result


@dataclass(slots=True, eq=False)
class SnapshotTransformError(DepthStreamException):
    """단일 스냅샷 변환 실패 (해당 메시지만 버림)"""

    error_domain: ErrorDomain = ErrorDomain.PAYLOAD
    error_code: ErrorCode = ErrorCode.INVALID_SCHEMA


@dataclass(slots=True, eq=False)
class InfoRequestError(DepthStreamException):
    """info 엔드포인트 요청 실패 (마지막 값 유지)"""

    error_domain: ErrorDomain = ErrorDomain.FETCH
    error_code: ErrorCode = ErrorCode.FETCH_FAILED
    retryable: bool = True


@dataclass(slots=True, eq=False)
class SymbolUniverseError(DepthStreamException):
    """기동 시 구독 대상 심볼을 확정할 수 없음 (치명적)"""

    error_domain: ErrorDomain = ErrorDomain.STARTUP
    error_code: ErrorCode = ErrorCode.EMPTY_UNIVERSE
