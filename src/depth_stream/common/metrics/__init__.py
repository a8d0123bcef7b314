"""스트림 통계.

공개 API:
- StreamStats: 연결 관리자 카운터
- StatsReporter: 주기 통계 로그
"""

from depth_stream.common.metrics.counter import StatsReporter, StatsSnapshot, StreamStats

__all__ = [
    "StatsReporter",
    "StatsSnapshot",
    "StreamStats",
]
