"""
Hyperliquid info 엔드포인트 클라이언트

POST 본문의 type 으로 조회 대상을 지정합니다 (spotMeta, allMids).
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from depth_stream.common.exceptions import InfoRequestError
from depth_stream.common.logger import PipelineLogger
from depth_stream.core.dto.io.info import AllMidsDTO, SpotMetaDTO

logger = PipelineLogger.get_logger("info_client", "hyperliquid")


class HyperliquidInfoClient:
    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HyperliquidInfoClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """HTTP 세션을 생성하거나 재사용합니다."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=10)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """HTTP 세션을 종료합니다."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(self, request_type: str) -> Any:
        session = await self._ensure_session()
        try:
            async with session.post(
                self.base_url, data=orjson.dumps({"type": request_type})
            ) as response:
                body = await response.read()
                if response.status >= 400:
                    raise InfoRequestError(
                        symbol=request_type,
                        message=f"HTTP {response.status}: {body[:200]!r}",
                    )
                return orjson.loads(body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise InfoRequestError(
                symbol=request_type, message="HTTP request failed", original_exception=e
            ) from e
        except orjson.JSONDecodeError as e:
            raise InfoRequestError(
                symbol=request_type, message="invalid JSON response", original_exception=e
            ) from e

    async def spot_meta(self) -> SpotMetaDTO:
        """현물 메타데이터 (토큰 목록 + 페어 유니버스)"""
        payload = await self._request("spotMeta")
        try:
            return SpotMetaDTO.model_validate(payload)
        except ValidationError as e:
            raise InfoRequestError(
                symbol="spotMeta", message="unexpected spotMeta schema", original_exception=e
            ) from e

    async def all_mids(self) -> dict[str, str]:
        """심볼 → 중간가 문자열"""
        payload = await self._request("allMids")
        try:
            return dict(AllMidsDTO.model_validate(payload).root)
        except ValidationError as e:
            raise InfoRequestError(
                symbol="allMids", message="unexpected allMids schema", original_exception=e
            ) from e
