"""l2Book 스냅샷 → 표시용 깊이 레코드 변환.

순수 함수입니다. 공유 가변 상태가 없으므로 동시에/반복 호출해도 안전합니다.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any, Final

from pydantic import ValidationError

from depth_stream.common.exceptions import SnapshotTransformError
from depth_stream.core.dto.internal.depth import DepthLevelDomain, SymbolDepthDomain
from depth_stream.core.dto.io.realtime import L2BookPayloadDTO, L2LevelDTO
from depth_stream.core.utils.timestamp import utc_now_iso

DEFAULT_TOP_N: Final[int] = 10
ZERO: Final[Decimal] = Decimal(0)
HUNDRED: Final[Decimal] = Decimal(100)

SPREAD_FORMAT: Final[str] = ".8f"
PERCENT_FORMAT: Final[str] = ".4f"
CUMULATIVE_FORMAT: Final[str] = ".4f"


def _best_price(levels: Sequence[L2LevelDTO]) -> Decimal:
    # 피드가 정렬되어 온다고 가정 (재정렬하지 않음)
    return levels[0].price_decimal() if levels else ZERO


def compute_spread(best_bid: Decimal, best_ask: Decimal) -> tuple[str, str]:
    """(spread_absolute, spread_percent) 계산

    - spread_absolute: best_ask - best_bid, 소수 8자리
    - spread_percent: spread / best_bid * 100, 소수 4자리 + '%' (best_bid ≤ 0 이면 "0")
    """
    spread = best_ask - best_bid
    if best_bid > ZERO:
        percent = f"{format(spread / best_bid * HUNDRED, PERCENT_FORMAT)}%"
    else:
        percent = "0"
    return format(spread, SPREAD_FORMAT), percent


def rank_levels(
    levels: Sequence[L2LevelDTO], *, top_n: int, observed_at: str
) -> tuple[DepthLevelDomain, ...]:
    """피드 순서대로 상위 N개에 순위/누적 수량을 부여 (방향마다 누적은 0부터)"""
    cumulative = ZERO
    ranked: list[DepthLevelDomain] = []
    for rank, level in enumerate(levels[:top_n], start=1):
        cumulative += level.size_decimal()
        ranked.append(
            DepthLevelDomain(
                rank=rank,
                price=level.px,
                size=level.sz,
                cumulative_size=format(cumulative, CUMULATIVE_FORMAT),
                observed_at=observed_at,
            )
        )
    return tuple(ranked)


def transform_snapshot(
    coin: str,
    payload: Mapping[str, Any],
    *,
    display_names: Mapping[str, str] | None = None,
    mid_prices: Mapping[str, str] | None = None,
    top_n: int = DEFAULT_TOP_N,
    observed_at: str | None = None,
) -> SymbolDepthDomain:
    """원본 l2Book data 를 SymbolDepthDomain 으로 변환합니다.

    Args:
        coin: 거래소 심볼 (canonical)
        payload: l2Book data (levels = [bids, asks])
        display_names: canonical → 표시 심볼 (없으면 canonical 사용)
        mid_prices: canonical → 중간가 문자열 (없으면 "0")
        top_n: 방향별 보존 호가 수
        observed_at: 관측 시각 (미지정 시 현재 UTC)

    Raises:
        SnapshotTransformError: 구조/숫자 형식 오류 (해당 메시지만 건너뛰어야 함)
    """
    if top_n < 1:
        raise ValueError(f"top_n must be positive: {top_n}")

    try:
        book = L2BookPayloadDTO.model_validate(payload)
    except ValidationError as e:
        raise SnapshotTransformError(
            symbol=coin, message="invalid l2Book payload", original_exception=e
        ) from e

    timestamp = observed_at or utc_now_iso()

    try:
        spread, spread_percent = compute_spread(_best_price(book.bids), _best_price(book.asks))
        bids = rank_levels(book.bids, top_n=top_n, observed_at=timestamp)
        asks = rank_levels(book.asks, top_n=top_n, observed_at=timestamp)
    except (InvalidOperation, ArithmeticError) as e:
        raise SnapshotTransformError(
            symbol=coin, message="numeric overflow in depth levels", original_exception=e
        ) from e

    names = display_names or {}
    mids = mid_prices or {}
    return SymbolDepthDomain(
        canonical_symbol=coin,
        display_symbol=names.get(coin) or coin,
        observed_at=timestamp,
        mid_price=mids.get(coin) or "0",
        spread_absolute=spread,
        spread_percent=spread_percent,
        bids=bids,
        asks=asks,
    )
