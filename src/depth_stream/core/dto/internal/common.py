from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, kw_only=True)
class ConnectionPolicyDomain:
    """재접속 정책.

    기본값은 고정 지연 (multiplier=1.0, jitter=0.0) 이며,
    max_reconnect_attempts=0 은 무제한을 의미합니다.
    """

    initial_backoff: float = 5.0
    max_backoff: float = 5.0
    backoff_multiplier: float = 1.0
    jitter: float = 0.0
    open_timeout: float = 10.0
    max_reconnect_attempts: int = 0


@dataclass(slots=True, frozen=True, kw_only=True)
class StreamScopeDomain:
    """스트림 식별 범위 (로그 컨텍스트용)"""

    url: str
    channel: str

    def to_key(self) -> str:
        return f"{self.channel}@{self.url}"
