"""
Dependency Injection Containers

아키텍처:
- InfrastructureContainer: 설정 싱글톤 + 외부 연동(info 클라이언트, 파일 저장)
- ApplicationContainer: 최상위 컨테이너 (모드별 sink 선택, 연결 관리자 팩토리)

주요 패턴:
- Object Provider: settings.py 싱글톤 주입
- Selector: APP_MODE 에 따른 sink 선택 (memory | save)
- Factory: 심볼 디렉토리 로드 후 연결 관리자 생성

사용 예시:
    container = ApplicationContainer()
    container.config.from_dict({"mode": app_settings.mode.value})
    manager = container.manager(symbols=directory.symbols, transform=transform)
"""

from dependency_injector import containers, providers

from depth_stream.application.sinks import CacheSink, PersistenceSink
from depth_stream.common.metrics import StreamStats
from depth_stream.config.settings import (
    app_settings,
    hyperliquid_settings,
    persistence_settings,
    websocket_settings,
)
from depth_stream.core.connection.manager import DepthStreamManager, spot_symbol_filter
from depth_stream.core.dto.internal.common import ConnectionPolicyDomain
from depth_stream.infra.cache.latest_depth import LatestDepthCache
from depth_stream.infra.hyperliquid.info_client import HyperliquidInfoClient
from depth_stream.infra.market.mid_price import MidPriceCache, MidPriceRefresher
from depth_stream.infra.storage.file_writer import DepthFileWriter
from depth_stream.infra.storage.scheduler import PersistenceScheduler


def build_connection_policy(reconnect_delay: float, open_timeout: float, max_attempts: int):
    """고정 지연 재접속 정책"""
    return ConnectionPolicyDomain(
        initial_backoff=reconnect_delay,
        max_backoff=reconnect_delay,
        backoff_multiplier=1.0,
        jitter=0.0,
        open_timeout=open_timeout,
        max_reconnect_attempts=max_attempts,
    )


# ========================================
# 1. Infrastructure Container (인프라 레이어)
# ========================================
class InfrastructureContainer(containers.DeclarativeContainer):
    """인프라 컨테이너

    - info REST 클라이언트, 중간가 캐시, 파일 저장 컴포넌트
    - 싱글톤 패턴으로 전역 공유
    """

    # ===== Settings 주입 (DI) =====
    app_config = providers.Object(app_settings)
    hyperliquid_config = providers.Object(hyperliquid_settings)
    websocket_config = providers.Object(websocket_settings)
    persistence_config = providers.Object(persistence_settings)

    info_client = providers.Singleton(
        HyperliquidInfoClient,
        base_url=hyperliquid_config.provided.info_url,
        timeout=hyperliquid_config.provided.request_timeout,
    )

    mid_price_cache = providers.Singleton(MidPriceCache)
    mid_price_refresher = providers.Singleton(
        MidPriceRefresher,
        source=info_client,
        cache=mid_price_cache,
    )

    file_writer = providers.Singleton(
        DepthFileWriter,
        output_dir=app_config.provided.output_dir,
        top_n=persistence_config.provided.top_n,
    )
    scheduler = providers.Singleton(
        PersistenceScheduler,
        writer=file_writer.provided.write,
        high_water_mark=persistence_config.provided.high_water_mark,
    )
    latest_cache = providers.Singleton(LatestDepthCache)


# ========================================
# 2. Application Container (최상위)
# ========================================
class ApplicationContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    infra = providers.Container(InfrastructureContainer)

    sink = providers.Selector(
        config.mode,
        memory=providers.Singleton(CacheSink, cache=infra.latest_cache),
        save=providers.Singleton(PersistenceSink, scheduler=infra.scheduler),
    )

    stats = providers.Singleton(StreamStats)

    connection_policy = providers.Factory(
        build_connection_policy,
        reconnect_delay=infra.websocket_config.provided.reconnect_delay,
        open_timeout=infra.websocket_config.provided.open_timeout,
        max_attempts=infra.websocket_config.provided.max_reconnect_attempts,
    )

    # symbols / transform 은 기동 시점(심볼 디렉토리 로드 후)에 전달
    manager = providers.Factory(
        DepthStreamManager,
        sink=sink,
        url=infra.hyperliquid_config.provided.ws_url,
        channel=infra.hyperliquid_config.provided.channel,
        symbol_filter=providers.Factory(
            spot_symbol_filter, infra.hyperliquid_config.provided.spot_prefix
        ),
        policy=connection_policy,
        stats=stats,
    )
