from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Protocol

from depth_stream.common.exceptions.exception_rule import FETCH_EXCEPTIONS, error_log_extra
from depth_stream.common.logger import PipelineLogger

logger = PipelineLogger.get_logger("mid_price", "market")


class MidPriceSource(Protocol):
    async def all_mids(self) -> dict[str, str]: ...


class MidPriceCache(Mapping[str, str]):
    """심볼 → 중간가. 갱신은 매핑 전체를 한 번에 교체합니다"""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._prices: Mapping[str, str] = MappingProxyType(dict(initial or {}))
        self.updated_count = 0

    def replace(self, prices: Mapping[str, str]) -> None:
        self._prices = MappingProxyType(dict(prices))
        self.updated_count += 1

    def __getitem__(self, symbol: str) -> str:
        return self._prices[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._prices)

    def __len__(self) -> int:
        return len(self._prices)


class MidPriceRefresher:
    """allMids 주기 갱신. 실패 시 직전 값을 유지합니다"""

    def __init__(self, source: MidPriceSource, cache: MidPriceCache) -> None:
        self._source = source
        self.cache = cache
        self.failures = 0

    async def refresh_once(self) -> bool:
        try:
            prices = await self._source.all_mids()
        except FETCH_EXCEPTIONS as e:
            self.failures += 1
            logger.warning(
                f"❌ 중간가 업데이트 실패 (직전 값 {len(self.cache)}개 유지): {e}",
                **error_log_extra(e, "fetch"),
            )
            return False

        self.cache.replace(prices)
        logger.debug(f"중간가 갱신 완료 ({len(prices)}개)")
        return True
