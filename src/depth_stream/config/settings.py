"""통합 Settings 모듈 - 환경변수 기반

설정 우선순위:
    1. 환경변수 (최우선) - export WS_RECONNECT_DELAY=3
    2. .env 파일 - depth_stream/config/.env
    3. 코드 기본값 (settings.py 내부)

사용 예시:
    # 기본값 (파일 저장 모드)
    python main.py

    # 메모리 캐시 모드 + 로그 레벨 변경
    export APP_MODE=memory
    export LOG_LEVEL=DEBUG
    python main.py
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from depth_stream.core.types import SinkMode

# 설정 파일 경로
config_dir = Path(__file__).parent


def env_settings(prefix: str) -> SettingsConfigDict:
    """환경변수 + .env 통합 설정

    Args:
        prefix: 환경변수 접두사 (예: WS_, HL_)
    """
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=config_dir / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppSettings(BaseSettings):
    """애플리케이션 일반 설정

    환경변수 오버라이드:
        APP_MODE: save(파일 저장) | memory(최신값 캐시)
        APP_OUTPUT_DIR: 저장 루트 디렉토리
    """

    mode: SinkMode = SinkMode.SAVE
    output_dir: Path = Path("realtime-spot-orderbooks")

    model_config = env_settings("APP_")


class HyperliquidSettings(BaseSettings):
    """거래소 엔드포인트 설정

    환경변수 오버라이드:
        HL_WS_URL: 웹소켓 주소
        HL_INFO_URL: info REST 주소 (spotMeta, allMids)
        HL_CHANNEL: 구독 채널 (기본: l2Book)
        HL_SPOT_PREFIX: 현물 페어 심볼 접두사 (기본: @)
        HL_REQUEST_TIMEOUT: REST 요청 타임아웃 (초)
    """

    ws_url: str = "wss://api.hyperliquid.xyz/ws"
    info_url: str = "https://api.hyperliquid.xyz/info"
    channel: str = "l2Book"
    spot_prefix: str = "@"
    request_timeout: float = 10.0

    model_config = env_settings("HL_")


class WebsocketSettings(BaseSettings):
    """WebSocket 설정 (모든 타이밍 설정은 초 단위)

    환경변수 오버라이드:
        WS_RECONNECT_DELAY: 연결 종료 후 재접속 대기 시간 (기본: 5초)
        WS_OPEN_TIMEOUT: 핸드셰이크 타임아웃 (기본: 10초)
        WS_MAX_RECONNECT_ATTEMPTS: 연속 재접속 한도 (0 = 무제한)
    """

    reconnect_delay: float = Field(default=5.0, ge=0.0)
    open_timeout: float = Field(default=10.0, gt=0.0)
    max_reconnect_attempts: int = Field(default=0, ge=0)

    model_config = env_settings("WS_")


class PersistenceSettings(BaseSettings):
    """파일 저장 스케줄러 설정

    환경변수 오버라이드:
        PERSIST_HIGH_WATER_MARK: 백프레셔 대기를 시작하는 동시 저장 작업 수 (기본: 100)
        PERSIST_TOP_N: 방향별 보존 호가 수 (기본: 10)
    """

    high_water_mark: int = Field(default=100, ge=1)
    top_n: int = Field(default=10, ge=1)

    model_config = env_settings("PERSIST_")


class TimerSettings(BaseSettings):
    """주기 작업 설정

    환경변수 오버라이드:
        TIMER_MID_PRICE_INTERVAL: 중간가 갱신 주기 (기본: 10초)
        TIMER_STATS_INTERVAL: 통계 출력 주기 (기본: 30초)
    """

    mid_price_interval: float = Field(default=10.0, gt=0.0)
    stats_interval: float = Field(default=30.0, gt=0.0)

    model_config = env_settings("TIMER_")


class LoggingSettings(BaseSettings):
    """로깅 설정

    환경변수 오버라이드:
        LOG_LEVEL: 로그 레벨 (기본: INFO)
        LOG_DIRECTORY: 로그 파일 디렉토리 (기본: logs)
        LOG_TO_FILE: 파일 로깅 여부 (기본: true)
    """

    level: str = "INFO"
    directory: str = "logs"
    to_file: bool = True

    model_config = env_settings("LOG_")


# ========================================
# 설정 인스턴스 (싱글톤)
# ========================================

app_settings = AppSettings()
hyperliquid_settings = HyperliquidSettings()
websocket_settings = WebsocketSettings()
persistence_settings = PersistenceSettings()
timer_settings = TimerSettings()
logging_settings = LoggingSettings()
