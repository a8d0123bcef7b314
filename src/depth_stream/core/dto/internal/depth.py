"""깊이(depth) 내부 도메인 모델.

내부 처리용 불변 도메인 객체 (dataclass 기반).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True, eq=True, repr=True, match_args=False, kw_only=True)
class DepthLevelDomain:
    """호가 레벨 도메인 (순위 + 누적 수량 주석).

    특징:
    - rank 는 방향 내 1부터 순증가
    - price/size 는 피드 원문 문자열 그대로 (정밀도 보존)
    - cumulative_size 는 rank 1 부터 현재 rank 까지 size 누적합 (소수 4자리)
    """

    rank: int
    price: str
    size: str
    cumulative_size: str
    observed_at: str


@dataclass(slots=True, frozen=True, eq=True, repr=True, match_args=False, kw_only=True)
class SymbolDepthDomain:
    """정규화된 스냅샷 (심볼 1개, 시점 1개).

    특징:
    - 불변 객체 (생성 후 캐시에 저장되거나 저장 작업 1개가 소비)
    - bids/asks 는 최우선 호가부터, 최대 top-N
    - spread_percent 는 "x.xxxx%" 또는 best bid ≤ 0 일 때 "0"
    """

    canonical_symbol: str
    display_symbol: str
    observed_at: str
    mid_price: str
    spread_absolute: str
    spread_percent: str
    bids: tuple[DepthLevelDomain, ...]
    asks: tuple[DepthLevelDomain, ...]

    @property
    def best_bid(self) -> DepthLevelDomain | None:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> DepthLevelDomain | None:
        return self.asks[0] if self.asks else None

    @property
    def bid_depth(self) -> str | None:
        """top-N 매수 누적 수량"""
        return self.bids[-1].cumulative_size if self.bids else None

    @property
    def ask_depth(self) -> str | None:
        """top-N 매도 누적 수량"""
        return self.asks[-1].cumulative_size if self.asks else None
