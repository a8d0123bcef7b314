from __future__ import annotations

import asyncio
import os
import re
import uuid
from pathlib import Path

from depth_stream.core.dto.internal.depth import SymbolDepthDomain
from depth_stream.infra.storage.renderers import render_csv, render_json, render_summary

_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>|]')


def safe_segment(display_symbol: str) -> str:
    """표시 심볼 → 파일시스템 안전 이름 (금지 문자 9종을 '-' 로 치환)"""
    segment = _UNSAFE_CHARS.sub("-", display_symbol)
    if segment in ("", ".", ".."):
        return "_"
    return segment


def replace_file(path: Path, data: bytes) -> None:
    """같은 디렉토리의 임시 파일에 쓴 뒤 os.replace 로 교체

    같은 경로에 대한 동시 저장이 겹쳐도 파일은 항상 레코드 하나의 완전한 내용입니다.
    """
    tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class DepthFileWriter:
    """심볼별 디렉토리에 JSON/CSV/요약 파일 3개를 덮어쓰기 저장"""

    def __init__(self, output_dir: str | Path, *, top_n: int = 10) -> None:
        self.output_dir = Path(output_dir)
        self.top_n = top_n

    def paths_for(self, display_symbol: str) -> tuple[Path, Path, Path]:
        """(json, csv, summary) 경로"""
        safe = safe_segment(display_symbol)
        directory = self.output_dir / safe
        return (
            directory / f"{safe}_orderbook.json",
            directory / f"{safe}_orderbook.csv",
            directory / f"{safe}_summary.txt",
        )

    async def write(self, depth: SymbolDepthDomain) -> tuple[Path, Path, Path]:
        json_path, csv_path, summary_path = self.paths_for(depth.display_symbol)
        await asyncio.to_thread(json_path.parent.mkdir, parents=True, exist_ok=True)

        results = await asyncio.gather(
            asyncio.to_thread(replace_file, json_path, render_json(depth)),
            asyncio.to_thread(replace_file, csv_path, render_csv(depth).encode("utf-8")),
            asyncio.to_thread(
                replace_file,
                summary_path,
                render_summary(depth, top_n=self.top_n).encode("utf-8"),
            ),
            return_exceptions=True,
        )
        # 세 파일 모두 끝난 뒤 첫 실패를 전파
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return json_path, csv_path, summary_path
