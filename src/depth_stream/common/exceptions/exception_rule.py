from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import InvalidOperation
from typing import TypeAlias

import aiohttp
import orjson
from pydantic import ValidationError
from websockets.exceptions import InvalidStatus, WebSocketException

from depth_stream.common.exceptions.base import (
    InfoRequestError,
    SnapshotTransformError,
    SymbolUniverseError,
)
from depth_stream.core.types import ErrorCategory, ErrorCode, ErrorDomain


@dataclass(frozen=True, slots=True)
class RuleDomain:
    """예외 분류 규칙 (kind 범위 + 예외 타입 → 분류 결과)"""

    kinds: tuple[str, ...]
    exc: type[BaseException] | tuple[type[BaseException], ...]
    result: ErrorCategory


# 역직렬화/구조 오류 (단일 메시지 폐기 대상)
DESERIALIZATION_ERRORS = (
    orjson.JSONDecodeError,
    ValidationError,
    InvalidOperation,
    ValueError,
    TypeError,
    KeyError,
    IndexError,
)

# 소켓/웹소켓 (재접속 대상)
SOCKET_EXCEPTIONS = (
    asyncio.TimeoutError,
    InvalidStatus,
    WebSocketException,
    OSError,
)

# 파일 저장 (해당 작업만 포기)
PERSISTENCE_EXCEPTIONS = (
    OSError,
    TypeError,
    ValueError,
)

# info REST 요청 (마지막 값 유지)
FETCH_EXCEPTIONS = (
    InfoRequestError,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


# 1) 도메인 예외 (가장 구체적)
RULES_DOMAIN: list[RuleDomain] = [
    RuleDomain(
        kinds=("ws", "transform"),
        exc=SnapshotTransformError,
        result=(ErrorDomain.PAYLOAD, ErrorCode.INVALID_SCHEMA, False),
    ),
    RuleDomain(
        kinds=("fetch",),
        exc=SymbolUniverseError,
        result=(ErrorDomain.STARTUP, ErrorCode.EMPTY_UNIVERSE, False),
    ),
    RuleDomain(
        kinds=("fetch",),
        exc=InfoRequestError,
        result=(ErrorDomain.FETCH, ErrorCode.FETCH_FAILED, True),
    ),
]

# 2) asyncio 규칙
RULES_ASYNCIO: list[RuleDomain] = [
    RuleDomain(
        kinds=("ws", "fetch"),
        exc=asyncio.TimeoutError,
        result=(ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
    ),
]

# 3) 역직렬화 규칙
RULES_TYPE: list[RuleDomain] = [
    RuleDomain(
        kinds=("ws", "transform", "fetch"),
        exc=DESERIALIZATION_ERRORS,
        result=(ErrorDomain.DESERIALIZATION, ErrorCode.DESERIALIZATION_ERROR, False),
    ),
]

# 4) 소켓 규칙
RULES_SOCKET: list[RuleDomain] = [
    RuleDomain(
        kinds=("ws",),
        exc=SOCKET_EXCEPTIONS,
        result=(ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
    ),
]

# 5) REST 규칙
RULES_FETCH: list[RuleDomain] = [
    RuleDomain(
        kinds=("fetch",),
        exc=aiohttp.ClientError,
        result=(ErrorDomain.FETCH, ErrorCode.FETCH_FAILED, True),
    ),
]

# 6) 파일 저장 규칙 (재시도하지 않음)
RULES_PERSISTENCE: list[RuleDomain] = [
    RuleDomain(
        kinds=("persistence",),
        exc=PERSISTENCE_EXCEPTIONS,
        result=(ErrorDomain.PERSISTENCE, ErrorCode.WRITE_FAILED, False),
    ),
]

# 매칭 우선순위를 보장하기 위해 "구체 → 포괄" 선언 순서를 유지합니다.
RULES_ALL: list[RuleDomain] = [
    *RULES_DOMAIN,
    *RULES_ASYNCIO,
    *RULES_TYPE,
    *RULES_SOCKET,
    *RULES_FETCH,
    *RULES_PERSISTENCE,
]

RuleDict: TypeAlias = dict[str, list[RuleDomain]]
RULES_BY_KIND: RuleDict = {
    kind: [rule for rule in RULES_ALL if kind in rule.kinds]
    for kind in ("ws", "transform", "fetch", "persistence")
}


def classify_exception(err: BaseException, kind: str) -> ErrorCategory:
    """예외 → (ErrorDomain, ErrorCode, retryable) 분류기 (규칙 테이블 기반)

    규칙은 "구체 → 포괄" 순서로 선언되어 가장 특수한 규칙이 먼저 매칭됩니다.
    알 수 없는 kind 이거나 매칭되는 규칙이 없으면 UNKNOWN 으로 분류합니다.
    """
    for rule in RULES_BY_KIND.get(kind, []):
        if isinstance(err, rule.exc):
            return rule.result

    return (ErrorDomain.UNKNOWN, ErrorCode.UNKNOWN_ERROR, False)


def error_log_extra(err: BaseException, kind: str, **context: object) -> dict[str, object]:
    """로그 extra 표준 키 구성 (error_type / error_domain / error_code / retryable)"""
    domain, code, retryable = classify_exception(err, kind)
    return {
        "error_type": type(err).__name__,
        "error_domain": domain.value,
        "error_code": code.value,
        "retryable": retryable,
        **context,
    }
