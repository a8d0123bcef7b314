from __future__ import annotations

import random

from depth_stream.core.dto.internal.common import ConnectionPolicyDomain


def compute_next_backoff(policy: ConnectionPolicyDomain, attempt: int) -> float:
    """재접속 대기 시간 계산 (지수 + 지터, 기본 정책은 고정 지연).

    Args:
        policy: 백오프 파라미터가 담긴 정책 객체
        attempt: 0부터 시작하는 시도 인덱스

    Returns:
        다음 대기 시간(초)
    """
    base = min(
        policy.initial_backoff * (policy.backoff_multiplier**attempt),
        policy.max_backoff,
    )
    if policy.jitter <= 0:
        return max(0.0, base)
    jitter_range = base * policy.jitter
    return max(0.0, base + random.uniform(-jitter_range, jitter_range))
