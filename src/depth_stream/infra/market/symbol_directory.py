"""현물 심볼 디렉토리 (canonical ↔ 표시 심볼)

기동 시 spotMeta 로 한 번 구성되고 이후 변경되지 않습니다.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Protocol

from depth_stream.common.exceptions import SymbolUniverseError
from depth_stream.common.logger import PipelineLogger
from depth_stream.core.dto.io.info import SpotMetaDTO

logger = PipelineLogger.get_logger("symbol_directory", "market")

DEFAULT_SPOT_PREFIX = "@"


class SpotMetaSource(Protocol):
    async def spot_meta(self) -> SpotMetaDTO: ...


class SymbolDirectory:
    __slots__ = ("_symbols", "_display_names", "_reverse", "spot_prefix")

    def __init__(
        self,
        symbols: Iterable[str],
        display_names: Mapping[str, str] | None = None,
        *,
        spot_prefix: str = DEFAULT_SPOT_PREFIX,
    ) -> None:
        self._symbols: tuple[str, ...] = tuple(dict.fromkeys(symbols))
        names = dict(display_names or {})
        self._display_names = MappingProxyType(names)
        self._reverse = MappingProxyType({display: coin for coin, display in names.items()})
        self.spot_prefix = spot_prefix

    @classmethod
    def from_spot_meta(
        cls, meta: SpotMetaDTO, *, spot_prefix: str = DEFAULT_SPOT_PREFIX
    ) -> SymbolDirectory:
        """spotMeta 응답으로 구성

        - 추적 대상: 이름이 spot_prefix 로 시작하는 페어
        - 표시 이름: 토큰 2개짜리 페어만 "<base>-<quote>" (모르는 인덱스는 Token<i>)
        """
        token_names = {token.index: token.name for token in meta.tokens}

        symbols: list[str] = []
        display_names: dict[str, str] = {}
        for pair in meta.universe:
            if not pair.name.startswith(spot_prefix):
                continue
            symbols.append(pair.name)

            names = [token_names.get(index, f"Token{index}") for index in pair.tokens]
            if len(names) == 2:
                display_names[pair.name] = f"{names[0]}-{names[1]}"

        return cls(symbols, display_names, spot_prefix=spot_prefix)

    @property
    def symbols(self) -> tuple[str, ...]:
        return self._symbols

    @property
    def display_names(self) -> Mapping[str, str]:
        return self._display_names

    def display_name(self, coin: str) -> str:
        return self._display_names.get(coin, coin)

    def canonical(self, display_symbol: str) -> str | None:
        return self._reverse.get(display_symbol)

    def is_tracked(self, coin: str) -> bool:
        return coin.startswith(self.spot_prefix)

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, coin: object) -> bool:
        return coin in self._symbols


async def load_symbol_directory(
    source: SpotMetaSource, *, spot_prefix: str = DEFAULT_SPOT_PREFIX
) -> SymbolDirectory:
    """spotMeta 조회 → 디렉토리. 추적 대상이 없으면 치명적 오류

    Raises:
        InfoRequestError: 조회 실패
        SymbolUniverseError: 현물 페어 0개
    """
    meta = await source.spot_meta()
    directory = SymbolDirectory.from_spot_meta(meta, spot_prefix=spot_prefix)
    if not len(directory):
        raise SymbolUniverseError(symbol=spot_prefix, message="현물 코인을 찾을 수 없습니다.")

    logger.info(
        f"✅ {len(directory)}개 현물 페어 로드 완료 (표시 이름 {len(directory.display_names)}개)"
    )
    return directory
