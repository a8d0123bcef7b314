"""변환 결과 소비자 (처리 모드별)

- CacheSink (memory): 최신값 캐시에 덮어쓰기
- PersistenceSink (save): 저장 스케줄러에 등록 후 백프레셔 확인
"""

from __future__ import annotations

from depth_stream.core.dto.internal.depth import SymbolDepthDomain
from depth_stream.infra.cache.latest_depth import LatestDepthCache
from depth_stream.infra.storage.scheduler import PersistenceScheduler


class CacheSink:
    def __init__(self, cache: LatestDepthCache) -> None:
        self.cache = cache

    async def accept(self, depth: SymbolDepthDomain) -> None:
        self.cache.update(depth)

    def queue_depth(self) -> int:
        return len(self.cache)

    async def close(self) -> None:
        return None


class PersistenceSink:
    def __init__(self, scheduler: PersistenceScheduler) -> None:
        self.scheduler = scheduler

    async def accept(self, depth: SymbolDepthDomain) -> None:
        self.scheduler.submit(depth)
        await self.scheduler.relieve()

    def queue_depth(self) -> int:
        return self.scheduler.in_flight

    async def close(self) -> None:
        await self.scheduler.aclose()
