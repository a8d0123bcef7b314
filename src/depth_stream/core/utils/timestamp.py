from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """현재 UTC 시각 (ISO 8601, 밀리초, 'Z' 접미사)

    >>> utc_now_iso()  # doctest: +SKIP
    '2026-10-19T03:15:42.123Z'
    """
    return to_iso_z(datetime.now(timezone.utc))


def to_iso_z(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
