from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from depth_stream.core.dto.io.depth import SymbolDepthRecordDTO
from depth_stream.infra.storage.file_writer import DepthFileWriter, replace_file, safe_segment
from depth_stream.infra.storage.renderers import (
    CSV_HEADER,
    parse_depth_csv,
    render_csv,
    render_json,
    render_summary,
)
from depth_stream.infra.storage.scheduler import PersistenceScheduler
from tests.factory_builders import OBSERVED_AT, build_depth


@pytest.mark.parametrize(
    ("display", "expected"),
    [
        ("HFUN-USDC", "HFUN-USDC"),
        ("A/B", "A-B"),
        ('a\\b:c*d?e"f<g>h|i', "a-b-c-d-e-f-g-h-i"),
        ("", "_"),
        ("..", "_"),
    ],
)
def test_safe_segment(display: str, expected: str) -> None:
    assert safe_segment(display) == expected


def test_render_json_uses_record_keys() -> None:
    record = orjson.loads(render_json(build_depth()))

    assert list(record) == [
        "symbol",
        "displaySymbol",
        "lastUpdate",
        "midPrice",
        "spread",
        "spreadPercentage",
        "bids",
        "asks",
    ]
    assert record["spreadPercentage"] == "0.5000%"
    assert record["bids"][1] == {
        "level": 2,
        "price": "99",
        "size": "3",
        "cumulative": "5.0000",
        "timestamp": OBSERVED_AT,
    }


def test_csv_round_trip_bids_then_asks() -> None:
    depth = build_depth()
    text = render_csv(depth)

    assert text.splitlines()[0] == ",".join(CSV_HEADER)
    rows = parse_depth_csv(text)
    expected = [
        (side, level.rank, level.price, level.size, level.cumulative_size, level.observed_at)
        for side, levels in (("BID", depth.bids), ("ASK", depth.asks))
        for level in levels
    ]
    assert [tuple(row) for row in rows] == expected
    assert [(row.side, row.level) for row in rows] == [
        ("BID", 1),
        ("BID", 2),
        ("ASK", 1),
        ("ASK", 2),
    ]


def test_parse_depth_csv_rejects_unknown_header() -> None:
    with pytest.raises(ValueError):
        parse_depth_csv("a,b,c\n")


def test_summary_uses_not_available_for_empty_sides() -> None:
    summary = render_summary(build_depth(bids=(), asks=()))

    assert "매수 1호가: N/A (수량: N/A)" in summary
    assert "상위 10호가 매도 누적: N/A" in summary


def test_summary_reports_best_levels() -> None:
    summary = render_summary(build_depth())

    assert "HFUN-USDC 오더북 요약 (현물)" in summary
    assert "원본 심볼: @1" in summary
    assert "스프레드: 0.50000000 (0.5000%)" in summary
    assert "매도 1호가: 100.5 (수량: 1)" in summary
    assert "상위 10호가 매수 누적: 5.0000" in summary


@pytest.mark.asyncio
async def test_writer_creates_three_files(tmp_path: Path) -> None:
    writer = DepthFileWriter(tmp_path / "out")

    json_path, csv_path, summary_path = await writer.write(build_depth(display="A/B"))

    assert json_path == tmp_path / "out" / "A-B" / "A-B_orderbook.json"
    assert csv_path.name == "A-B_orderbook.csv"
    assert summary_path.name == "A-B_summary.txt"
    assert all(path.exists() for path in (json_path, csv_path, summary_path))


@pytest.mark.asyncio
async def test_writing_same_record_twice_is_byte_identical(tmp_path: Path) -> None:
    writer = DepthFileWriter(tmp_path)
    depth = build_depth()

    paths = await writer.write(depth)
    first = [path.read_bytes() for path in paths]
    paths = await writer.write(depth)
    second = [path.read_bytes() for path in paths]

    assert first == second


@pytest.mark.asyncio
async def test_writer_overwrites_previous_record(tmp_path: Path) -> None:
    writer = DepthFileWriter(tmp_path)

    await writer.write(build_depth(mid_price="1"))
    json_path, _, _ = await writer.write(build_depth(mid_price="2"))

    assert orjson.loads(json_path.read_bytes())["midPrice"] == "2"


@pytest.mark.asyncio
async def test_writer_propagates_failure_after_all_writes_settle(tmp_path: Path) -> None:
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory", encoding="utf-8")
    writer = DepthFileWriter(blocker)

    with pytest.raises(OSError):
        await writer.write(build_depth())


@pytest.mark.asyncio
async def test_saved_json_reads_back_as_same_record(tmp_path: Path) -> None:
    depth = build_depth()
    json_path, _, _ = await DepthFileWriter(tmp_path).write(depth)

    record = SymbolDepthRecordDTO.model_validate_json(json_path.read_bytes())

    assert record.to_domain() == depth


@pytest.mark.asyncio
async def test_concurrent_same_symbol_writes_leave_complete_files(tmp_path: Path) -> None:
    writer = DepthFileWriter(tmp_path)
    scheduler = PersistenceScheduler(writer.write)
    long_record = build_depth(mid_price="9" * 4000)
    short_record = build_depth(mid_price="2")

    for _ in range(50):
        scheduler.submit(long_record)
        scheduler.submit(short_record)
        await scheduler.drain()

        json_path, csv_path, summary_path = writer.paths_for(long_record.display_symbol)
        record = SymbolDepthRecordDTO.model_validate_json(json_path.read_bytes())
        assert record.to_domain() in (long_record, short_record)
        assert len(parse_depth_csv(csv_path.read_text(encoding="utf-8"))) == 4
        assert summary_path.read_text(encoding="utf-8") in (
            render_summary(long_record),
            render_summary(short_record),
        )

    assert scheduler.failed == 0
    assert not list(tmp_path.rglob("*.tmp"))


def test_replace_file_removes_temp_file_on_failure(tmp_path: Path) -> None:
    target = tmp_path / "occupied"
    target.mkdir()
    (target / "child").write_text("x", encoding="utf-8")

    with pytest.raises(OSError):
        replace_file(target, b"data")

    assert not list(tmp_path.glob("*.tmp"))
