"""Service container — every long-lived object, built once at process start.

``build_services`` wires the whole graph from Settings. Empty DATABASE_URL /
REDIS_URL select the in-memory store / cache, which is also what the test
suite uses. Handlers reach the container through ``request.app.state``.
"""

from dataclasses import dataclass
from datetime import datetime
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import Settings
from src.ff_auth.application.blacklist import TokenBlacklist
from src.ff_auth.application.mfa import MfaService
from src.ff_auth.application.token_service import TokenService
from src.ff_auth.application.token_version import TokenVersionStore
from src.ff_auth.application.user_service import UserService
from src.ff_auth.auth.jwt_handler import JwtHandler
from src.ff_auth.domain.repository import UserRepositoryProtocol
from src.ff_auth.infrastructure.memory import InMemoryUserRepository
from src.ff_auth.infrastructure.persistence import UserRepository
from src.ff_common.cache import CacheService
from src.ff_common.database import create_engine, create_session_factory
from src.ff_common.datetime_utils import utc_now
from src.ff_common.redis_client import create_redis
from src.ff_finance.application.service import FinanceRepository
from src.ff_finance.domain.repository import FinanceStoreProtocol
from src.ff_finance.infrastructure.memory import InMemoryFinanceStore
from src.ff_finance.infrastructure.persistence import FinanceStore
from src.ff_insights.application.adapter import InsightsAdapterProtocol, create_insights_adapter
from src.ff_insights.application.queue import InsightQueue
from src.ff_insights.domain.repository import InsightStoreProtocol
from src.ff_insights.infrastructure.memory import InMemoryInsightStore
from src.ff_insights.infrastructure.persistence import InsightStore


@dataclass
class Services:
    settings: Settings
    cache: CacheService
    users: UserRepositoryProtocol
    jwt: JwtHandler
    tokens: TokenService
    user_service: UserService
    mfa: MfaService
    finance: FinanceRepository
    insights: InsightQueue
    engine: AsyncEngine | None = None

    async def aclose(self) -> None:
        await self.insights.wait_idle()
        await self.cache.close()
        if self.engine is not None:
            await self.engine.dispose()


def blacklist_ttl_seconds(settings: Settings) -> int:
    """Blacklist entries must outlive the longest token they can revoke."""
    refresh_lifetime = settings.JWT_REFRESH_EXPIRE_DAYS * 24 * 60 * 60
    return max(settings.TOKEN_BLACKLIST_TTL_SECONDS, refresh_lifetime)


def build_services(
    settings: Settings,
    *,
    cache: CacheService | None = None,
    users: UserRepositoryProtocol | None = None,
    finance_store: FinanceStoreProtocol | None = None,
    insight_store: InsightStoreProtocol | None = None,
    insights_adapter: InsightsAdapterProtocol | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> Services:
    """Wire the service graph. Keyword overrides exist for tests."""
    engine: AsyncEngine | None = None
    if settings.DATABASE_URL:
        engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        session_factory = create_session_factory(engine)
        users = users or UserRepository(session_factory)
        finance_store = finance_store or FinanceStore(session_factory)
        insight_store = insight_store or InsightStore(session_factory)
    else:
        users = users or InMemoryUserRepository()
        finance_store = finance_store or InMemoryFinanceStore()
        insight_store = insight_store or InMemoryInsightStore()

    if cache is None:
        cache = CacheService(create_redis(settings.REDIS_URL) if settings.REDIS_URL else None)

    jwt_handler = JwtHandler(settings)
    tokens = TokenService(
        jwt_handler,
        users,
        TokenVersionStore(users),
        TokenBlacklist(cache, blacklist_ttl_seconds(settings)),
    )
    finance = FinanceRepository(
        finance_store,
        cache,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        category_ttl_seconds=settings.CATEGORY_CACHE_TTL_SECONDS,
        clock=clock,
    )
    insights = InsightQueue(
        insight_store,
        finance,
        insights_adapter or create_insights_adapter(settings.AI_MODEL_PROVIDER),
        freshness_hours=settings.INSIGHT_FRESHNESS_HOURS,
        clock=clock,
    )

    return Services(
        settings=settings,
        cache=cache,
        users=users,
        jwt=jwt_handler,
        tokens=tokens,
        user_service=UserService(users, tokens),
        mfa=MfaService(cache, users, settings.MFA_ISSUER, settings.MFA_SETUP_TTL_SECONDS),
        finance=finance,
        insights=insights,
        engine=engine,
    )
