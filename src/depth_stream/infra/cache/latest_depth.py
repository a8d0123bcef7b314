from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from depth_stream.core.dto.internal.depth import SymbolDepthDomain


class LatestDepthCache:
    """심볼(canonical) → 최신 깊이 레코드. 갱신은 통째로 교체 (last-write-wins)"""

    def __init__(self) -> None:
        self._entries: dict[str, SymbolDepthDomain] = {}

    def update(self, depth: SymbolDepthDomain) -> None:
        self._entries[depth.canonical_symbol] = depth

    def get(self, symbol: str) -> SymbolDepthDomain | None:
        return self._entries.get(symbol)

    def snapshot(self) -> Mapping[str, SymbolDepthDomain]:
        """읽기 전용 사본"""
        return MappingProxyType(dict(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries
