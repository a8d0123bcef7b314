"""info 엔드포인트 응답 DTO (spotMeta, allMids)"""

from __future__ import annotations

from pydantic import ConfigDict, Field, RootModel

from depth_stream.core.dto.io._base import InboundModelDTO


class SpotTokenDTO(InboundModelDTO):
    name: str
    index: int


class SpotPairDTO(InboundModelDTO):
    name: str = Field(..., description="거래소 페어 식별자 (현물은 '@' 접두사)")
    tokens: list[int] = Field(default_factory=list, description="[base, quote] 토큰 인덱스")
    index: int | None = None


class SpotMetaDTO(InboundModelDTO):
    tokens: list[SpotTokenDTO] = Field(default_factory=list)
    universe: list[SpotPairDTO] = Field(default_factory=list)


class AllMidsDTO(RootModel[dict[str, str]]):
    """심볼 → 중간가 문자열"""

    model_config = ConfigDict(coerce_numbers_to_str=True, frozen=True)
