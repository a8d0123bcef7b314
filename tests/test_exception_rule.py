from __future__ import annotations

import asyncio
from decimal import InvalidOperation

import aiohttp
import orjson
import pytest
from websockets.exceptions import ConnectionClosedError

from depth_stream.common.exceptions import (
    InfoRequestError,
    SnapshotTransformError,
    SymbolUniverseError,
)
from depth_stream.common.exceptions.exception_rule import classify_exception, error_log_extra
from depth_stream.core.types import ErrorCode, ErrorDomain


@pytest.mark.parametrize(
    ("err", "kind", "expected"),
    [
        (
            SnapshotTransformError(symbol="@1", message="bad"),
            "transform",
            (ErrorDomain.PAYLOAD, ErrorCode.INVALID_SCHEMA, False),
        ),
        (
            InvalidOperation(),
            "transform",
            (ErrorDomain.DESERIALIZATION, ErrorCode.DESERIALIZATION_ERROR, False),
        ),
        (
            orjson.JSONDecodeError("x", "doc", 0),
            "ws",
            (ErrorDomain.DESERIALIZATION, ErrorCode.DESERIALIZATION_ERROR, False),
        ),
        (
            ConnectionClosedError(None, None),
            "ws",
            (ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
        ),
        (
            asyncio.TimeoutError(),
            "ws",
            (ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
        ),
        (
            OSError("disk full"),
            "persistence",
            (ErrorDomain.PERSISTENCE, ErrorCode.WRITE_FAILED, False),
        ),
        (
            aiohttp.ClientConnectionError("refused"),
            "fetch",
            (ErrorDomain.FETCH, ErrorCode.FETCH_FAILED, True),
        ),
        (
            InfoRequestError(symbol="allMids", message="HTTP 500"),
            "fetch",
            (ErrorDomain.FETCH, ErrorCode.FETCH_FAILED, True),
        ),
        (
            SymbolUniverseError(symbol="@", message="empty"),
            "fetch",
            (ErrorDomain.STARTUP, ErrorCode.EMPTY_UNIVERSE, False),
        ),
    ],
)
def test_classify_exception(err: BaseException, kind: str, expected: tuple) -> None:
    assert classify_exception(err, kind) == expected


def test_unknown_kind_or_exception_falls_back() -> None:
    unknown = (ErrorDomain.UNKNOWN, ErrorCode.UNKNOWN_ERROR, False)
    assert classify_exception(RuntimeError("x"), "ws") == unknown
    assert classify_exception(OSError("x"), "nope") == unknown


def test_error_log_extra_has_standard_keys() -> None:
    extra = error_log_extra(OSError("disk"), "persistence", symbol="HFUN-USDC")

    assert extra == {
        "error_type": "OSError",
        "error_domain": "persistence",
        "error_code": "write_failed",
        "retryable": False,
        "symbol": "HFUN-USDC",
    }


def test_domain_exception_to_dict() -> None:
    original = ValueError("bad px")
    err = SnapshotTransformError(symbol="@1", message="invalid", original_exception=original)

    payload = err.to_dict()

    assert payload["symbol"] == "@1"
    assert payload["error_code"] == ErrorCode.INVALID_SCHEMA.value
    assert payload["original_error_type"] == "ValueError"
    assert str(err) == "@1: invalid (bad px)"
