"""저장용 깊이 레코드 DTO (full-record JSON 스키마)

필드명은 저장 파일의 camelCase 키를 별칭으로 유지합니다.
"""

from __future__ import annotations

from pydantic import Field

from depth_stream.core.dto.internal.depth import DepthLevelDomain, SymbolDepthDomain
from depth_stream.core.dto.io._base import RecordModelDTO


class DepthLevelRecordDTO(RecordModelDTO):
    level: int = Field(..., ge=1, description="방향 내 순위 (1부터)")
    price: str
    size: str
    cumulative: str
    timestamp: str

    @classmethod
    def from_domain(cls, level: DepthLevelDomain) -> DepthLevelRecordDTO:
        return cls(
            level=level.rank,
            price=level.price,
            size=level.size,
            cumulative=level.cumulative_size,
            timestamp=level.observed_at,
        )


class SymbolDepthRecordDTO(RecordModelDTO):
    symbol: str = Field(..., description="거래소 심볼 (canonical)")
    display_symbol: str = Field(..., alias="displaySymbol")
    last_update: str = Field(..., alias="lastUpdate")
    mid_price: str = Field(..., alias="midPrice")
    spread: str
    spread_percentage: str = Field(..., alias="spreadPercentage")
    bids: list[DepthLevelRecordDTO]
    asks: list[DepthLevelRecordDTO]

    @classmethod
    def from_domain(cls, depth: SymbolDepthDomain) -> SymbolDepthRecordDTO:
        return cls(
            symbol=depth.canonical_symbol,
            display_symbol=depth.display_symbol,
            last_update=depth.observed_at,
            mid_price=depth.mid_price,
            spread=depth.spread_absolute,
            spread_percentage=depth.spread_percent,
            bids=[DepthLevelRecordDTO.from_domain(level) for level in depth.bids],
            asks=[DepthLevelRecordDTO.from_domain(level) for level in depth.asks],
        )

    def to_domain(self) -> SymbolDepthDomain:
        def _levels(items: list[DepthLevelRecordDTO]) -> tuple[DepthLevelDomain, ...]:
            return tuple(
                DepthLevelDomain(
                    rank=item.level,
                    price=item.price,
                    size=item.size,
                    cumulative_size=item.cumulative,
                    observed_at=item.timestamp,
                )
                for item in items
            )

        return SymbolDepthDomain(
            canonical_symbol=self.symbol,
            display_symbol=self.display_symbol,
            observed_at=self.last_update,
            mid_price=self.mid_price,
            spread_absolute=self.spread,
            spread_percent=self.spread_percentage,
            bids=_levels(self.bids),
            asks=_levels(self.asks),
        )
