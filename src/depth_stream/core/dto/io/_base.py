"""I/O 경계 DTO 기반 설정.

- 수신(거래소 → 수집기): 알 수 없는 필드는 무시, 숫자 → 문자열 허용
- 저장(수집기 → 파일): 불변, 알 수 없는 필드 금지, 별칭(camelCase) 직렬화
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

INBOUND_CONFIG = ConfigDict(
    extra="ignore",
    str_strip_whitespace=True,
    coerce_numbers_to_str=True,
    frozen=True,
)

RECORD_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
    populate_by_name=True,
    validate_default=True,
)


class InboundModelDTO(BaseModel):
    """거래소 수신 페이로드 베이스"""

    model_config = INBOUND_CONFIG


class RecordModelDTO(BaseModel):
    """저장 레코드 베이스 (결정적 직렬화: 자동 생성 필드 없음)"""

    model_config = RECORD_CONFIG
