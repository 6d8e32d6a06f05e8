"""Composition root: builds every long-lived component from settings."""

from dataclasses import dataclass

import httpx
import structlog

from hn30.cache import SnapshotCache
from hn30.enrich import ArticleTextExtractor, OpenGraphEnricher
from hn30.fetch import FetchConfig, HttpFetcher
from hn30.ledger import LedgerStore, TursoReplica
from hn30.notify import NotificationDispatcher, OneSignalSink
from hn30.proxy import FetchProxy
from hn30.proxy.validate import Resolver, resolve_host
from hn30.ratelimit import RateLimiter
from hn30.refresh import RefreshEngine, RefreshScheduler
from hn30.settings import AppSettings
from hn30.source import HackerNewsClient
from hn30.summarize import GeminiApiKeyClient, Summarizer


logger = structlog.get_logger()


@dataclass
class Container:
    """Resolved dependencies for the service."""

    settings: AppSettings
    cache: SnapshotCache
    ledger: LedgerStore
    dispatcher: NotificationDispatcher
    replica: TursoReplica | None
    engine: RefreshEngine
    scheduler: RefreshScheduler
    rate_limiter: RateLimiter
    proxy: FetchProxy
    summarizer: Summarizer

    def close(self) -> None:
        """Release background resources. Call after the listener has stopped."""
        self.scheduler.stop()
        self.dispatcher.close(wait=False)
        self.ledger.close()


def build_container(
    settings: AppSettings,
    transport: httpx.BaseTransport | None = None,
    resolver: Resolver = resolve_host,
) -> Container:
    """Wire the service from settings.

    Optional integrations (notifications, replica, summaries) are left
    disabled when their credentials are absent. The ledger is created but
    not connected.

    Args:
        settings: Application settings.
        transport: Optional httpx transport shared by every outbound client.
        resolver: Hostname resolver for proxy validation.

    Returns:
        The wired container.
    """
    log = logger.bind(component="app")
    fetch_config = FetchConfig()
    fetcher = HttpFetcher(fetch_config, transport=transport)
    cache = SnapshotCache()
    ledger = LedgerStore(settings.sqlite_path)

    sink = None
    if settings.notifications_enabled:
        sink = OneSignalSink(
            settings.onesignal_app_id or "",
            settings.onesignal_key or "",
            transport=transport,
        )
    else:
        log.info("notifications_disabled", reason="credentials_missing")
    dispatcher = NotificationDispatcher(sink)

    replica = None
    if settings.replica_enabled:
        replica = TursoReplica(
            settings.turso_database_url or "",
            settings.turso_auth_token or "",
            transport=transport,
        )
    else:
        log.info("replica_disabled", reason="credentials_missing")

    model_client = None
    if settings.summaries_enabled:
        model_client = GeminiApiKeyClient(
            settings.gemini_api_key or "", transport=transport
        )
    else:
        log.info("summaries_disabled", reason="credentials_missing")

    engine = RefreshEngine(
        source=HackerNewsClient(fetcher),
        enricher=OpenGraphEnricher(fetcher),
        ledger=ledger,
        dispatcher=dispatcher,
        cache=cache,
        replica=replica,
    )

    return Container(
        settings=settings,
        cache=cache,
        ledger=ledger,
        dispatcher=dispatcher,
        replica=replica,
        engine=engine,
        scheduler=RefreshScheduler(
            engine, interval_seconds=settings.refresh_interval_seconds
        ),
        rate_limiter=RateLimiter(),
        proxy=FetchProxy(fetch_config, resolver=resolver, transport=transport),
        summarizer=Summarizer(cache, ArticleTextExtractor(fetcher), model_client),
    )
