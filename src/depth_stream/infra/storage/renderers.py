"""깊이 레코드 → 저장 파일 본문 렌더러.

모든 렌더러는 순수/결정적입니다 (같은 레코드 → 같은 bytes).
"""

from __future__ import annotations

import csv
import io
from typing import Final, NamedTuple

from depth_stream.common.serde import to_bytes
from depth_stream.core.dto.internal.depth import DepthLevelDomain, SymbolDepthDomain
from depth_stream.core.dto.io.depth import SymbolDepthRecordDTO
from depth_stream.core.types import BookSide

CSV_HEADER: Final[tuple[str, ...]] = ("Side", "Level", "Price", "Size", "Cumulative", "Timestamp")
NOT_AVAILABLE: Final[str] = "N/A"


class CsvDepthRow(NamedTuple):
    side: BookSide
    level: int
    price: str
    size: str
    cumulative: str
    timestamp: str


def render_json(depth: SymbolDepthDomain) -> bytes:
    """전체 레코드 JSON (camelCase 키, 2칸 들여쓰기)"""
    record = SymbolDepthRecordDTO.from_domain(depth)
    return to_bytes(record.model_dump(by_alias=True), pretty=True)


def render_csv(depth: SymbolDepthDomain) -> str:
    """호가 1개당 1행, 매수(BID) 다음 매도(ASK)"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for side, levels in (("BID", depth.bids), ("ASK", depth.asks)):
        for level in levels:
            writer.writerow(
                (side, level.rank, level.price, level.size, level.cumulative_size, level.observed_at)
            )
    return buffer.getvalue()


def _price_and_size(level: DepthLevelDomain | None) -> tuple[str, str]:
    if level is None:
        return NOT_AVAILABLE, NOT_AVAILABLE
    return level.price or NOT_AVAILABLE, level.size or NOT_AVAILABLE


def render_summary(depth: SymbolDepthDomain, *, top_n: int = 10) -> str:
    bid_price, bid_size = _price_and_size(depth.best_bid)
    ask_price, ask_size = _price_and_size(depth.best_ask)
    lines = [
        "",
        f"{depth.display_symbol} 오더북 요약 (현물)",
        "===================",
        f"원본 심볼: {depth.canonical_symbol}",
        f"표시 심볼: {depth.display_symbol}",
        f"마지막 업데이트: {depth.observed_at}",
        f"중간가: {depth.mid_price}",
        f"스프레드: {depth.spread_absolute} ({depth.spread_percent})",
        "",
        f"매수 1호가: {bid_price} (수량: {bid_size})",
        f"매도 1호가: {ask_price} (수량: {ask_size})",
        "",
        f"상위 {top_n}호가 매수 누적: {depth.bid_depth or NOT_AVAILABLE}",
        f"상위 {top_n}호가 매도 누적: {depth.ask_depth or NOT_AVAILABLE}",
        "",
    ]
    return "\n".join(lines)


def parse_depth_csv(text: str) -> list[CsvDepthRow]:
    """render_csv 결과를 다시 행 목록으로 읽습니다.

    Raises:
        ValueError: 헤더 불일치 또는 알 수 없는 Side
    """
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header is None or tuple(header) != CSV_HEADER:
        raise ValueError(f"unexpected depth csv header: {header!r}")

    rows: list[CsvDepthRow] = []
    for record in reader:
        if not record:
            continue
        side, level, price, size, cumulative, timestamp = record
        if side not in ("BID", "ASK"):
            raise ValueError(f"unknown side: {side!r}")
        rows.append(CsvDepthRow(side, int(level), price, size, cumulative, timestamp))
    return rows
