"""실시간 수신 DTO (l2Book 채널)"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from pydantic import Field, field_validator

from depth_stream.core.dto.io._base import InboundModelDTO


class L2LevelDTO(InboundModelDTO):
    """단일 호가 (px, sz 는 유한한 10진수 문자열이어야 함)"""

    px: str = Field(..., description="가격")
    sz: str = Field(..., description="수량")
    n: int | None = Field(None, description="주문 수")

    @field_validator("px", "sz")
    @classmethod
    def _must_be_decimal(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"not a decimal string: {value!r}") from e
        if not parsed.is_finite():
            raise ValueError(f"non-finite decimal: {value!r}")
        return value

    def price_decimal(self) -> Decimal:
        return Decimal(self.px)

    def size_decimal(self) -> Decimal:
        return Decimal(self.sz)


class L2BookPayloadDTO(InboundModelDTO):
    """l2Book data 페이로드

    levels 는 정확히 두 개의 리스트 (매수, 매도) 여야 합니다.
    """

    coin: str | None = Field(None, description="거래소 심볼")
    time: int | None = Field(None, description="거래소 타임스탬프 (ms)")
    levels: tuple[list[L2LevelDTO], list[L2LevelDTO]] = Field(
        ..., description="[bids, asks]"
    )

    @property
    def bids(self) -> list[L2LevelDTO]:
        return self.levels[0]

    @property
    def asks(self) -> list[L2LevelDTO]:
        return self.levels[1]
