from __future__ import annotations

from typing import Any

import orjson

from depth_stream.core.dto.internal.common import ConnectionPolicyDomain
from depth_stream.core.dto.internal.depth import DepthLevelDomain, SymbolDepthDomain
from depth_stream.core.dto.io.info import SpotMetaDTO

OBSERVED_AT = "2026-02-15T06:00:00.000Z"


def build_level(px: str, sz: str, n: int = 1) -> dict[str, Any]:
    return {"px": px, "sz": sz, "n": n}


def build_l2_payload(
    *,
    coin: str = "@1",
    bids: list[dict[str, Any]] | None = None,
    asks: list[dict[str, Any]] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "coin": coin,
        "time": 1739599200000,
        "levels": [
            bids if bids is not None else [build_level("100", "2"), build_level("99", "3")],
            asks if asks is not None else [build_level("100.5", "1"), build_level("101", "4")],
        ],
    }
    payload.update(overrides)
    return payload


def build_l2_frame(*, coin: str = "@1", channel: str = "l2Book", **overrides: Any) -> str:
    message = {"channel": channel, "data": build_l2_payload(coin=coin, **overrides)}
    return orjson.dumps(message).decode("utf-8")


def build_spot_meta_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "tokens": [
            {"name": "USDC", "index": 0, "szDecimals": 8},
            {"name": "PURR", "index": 1, "szDecimals": 0},
            {"name": "HFUN", "index": 2, "szDecimals": 2},
        ],
        "universe": [
            {"name": "PURR/USDC", "tokens": [1, 0], "index": 0, "isCanonical": True},
            {"name": "@1", "tokens": [2, 0], "index": 1, "isCanonical": False},
            {"name": "@2", "tokens": [7, 0], "index": 2, "isCanonical": False},
            {"name": "@3", "tokens": [2], "index": 3, "isCanonical": False},
        ],
    }
    payload.update(overrides)
    return payload


def build_spot_meta(**overrides: Any) -> SpotMetaDTO:
    return SpotMetaDTO.model_validate(build_spot_meta_payload(**overrides))


def build_depth(
    *,
    symbol: str = "@1",
    display: str = "HFUN-USDC",
    observed_at: str = OBSERVED_AT,
    **overrides: Any,
) -> SymbolDepthDomain:
    fields: dict[str, Any] = {
        "canonical_symbol": symbol,
        "display_symbol": display,
        "observed_at": observed_at,
        "mid_price": "100.25",
        "spread_absolute": "0.50000000",
        "spread_percent": "0.5000%",
        "bids": (
            DepthLevelDomain(
                rank=1, price="100", size="2", cumulative_size="2.0000", observed_at=observed_at
            ),
            DepthLevelDomain(
                rank=2, price="99", size="3", cumulative_size="5.0000", observed_at=observed_at
            ),
        ),
        "asks": (
            DepthLevelDomain(
                rank=1, price="100.5", size="1", cumulative_size="1.0000", observed_at=observed_at
            ),
            DepthLevelDomain(
                rank=2, price="101", size="4", cumulative_size="5.0000", observed_at=observed_at
            ),
        ),
    }
    fields.update(overrides)
    return SymbolDepthDomain(**fields)


def build_connection_policy_domain(**overrides: Any) -> ConnectionPolicyDomain:
    fields: dict[str, Any] = {
        "initial_backoff": 0.0,
        "max_backoff": 0.0,
        "backoff_multiplier": 1.0,
        "jitter": 0.0,
        "open_timeout": 1.0,
        "max_reconnect_attempts": 0,
    }
    fields.update(overrides)
    return ConnectionPolicyDomain(**fields)
