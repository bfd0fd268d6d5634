"""Start-up wiring: Sentry, optional logging and the match store schema."""

from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.redis import RedisIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from mutualmatch.config import StoreConfig, get_settings
from mutualmatch.custom_types import ProfileResolver
from mutualmatch.services.match_service import MatchService
from mutualmatch.store.match_store import MatchStore
from mutualmatch.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def init_sentry() -> bool:
    """Initialize Sentry when a DSN is configured. Returns whether it was initialized."""
    settings = get_settings()
    if not settings.SENTRY_DSN:
        return False

    logger.info("Initializing Sentry...")
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=1.0 if settings.ENVIRONMENT == "development" else 0.1,
        integrations=[
            SqlalchemyIntegration(),
            RedisIntegration(),
        ],
    )
    logger.info("Sentry initialized")
    return True


def setup(
    config: Optional[StoreConfig] = None,
    profile_resolver: Optional[ProfileResolver] = None,
    configure_logs: bool = False,
) -> MatchService:
    """
    Initialize Sentry, create the store schema and return a ready service.

    Logging is left to the host application unless `configure_logs` is set,
    in which case a rendering handler is attached to the ``mutualmatch``
    logger only.

    Args:
        config (Optional[StoreConfig]): Store settings; read from the environment when omitted.
        profile_resolver (Optional[ProfileResolver]): Display hook used to decorate match views.
        configure_logs (bool): Install the library's own log handler.
    """
    if configure_logs:
        configure_logging()
    init_sentry()

    store = MatchStore(config or StoreConfig.from_settings())
    store.create_tables()
    return MatchService(store, profile_resolver=profile_resolver)
