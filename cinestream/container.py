"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des clients externes et de leurs primitives
de resilience (fetcher, caches, rate controller, resolveur de miroirs).
Toutes les instances sont des singletons: l'etat partage (cache, dernier
dispatch, cache de session) appartient explicitement au container.
"""

from dependency_injector import containers, providers

from .adapters.api.backend_client import FederatedBackendClient
from .adapters.api.cache import TTLCache
from .adapters.api.change_feed import ChangeFeed
from .adapters.api.fetch import Fetcher
from .adapters.api.iptv_client import ChannelDirectoryClient
from .adapters.api.mirrors import MirrorResolver
from .adapters.api.rate_limit import RateController
from .adapters.api.stream_cache import StreamSessionCache
from .adapters.api.tmdb_client import TMDBClient
from .config import Settings
from .services.federated_search import FederatedAggregator


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        tmdb = container.tmdb_client()
        aggregator = container.federated_aggregator()
        aggregator.attach(container.change_feed())
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Noyau reseau - un seul client httpx partage
    fetcher = providers.Singleton(
        Fetcher,
        default_timeout=config.provided.request_timeout,
    )

    # Cache des metadonnees et resultats federes - Singleton pour partage entre clients
    api_cache = providers.Singleton(
        TTLCache,
        ttl=config.provided.metadata_cache_ttl,
        directory=config.provided.cache_directory,
        size_limit=config.provided.cache_size_limit,
    )

    # Cache de session des flux - vide en bloc periodiquement
    stream_cache = providers.Singleton(
        StreamSessionCache,
        clear_interval=config.provided.stream_cache_clear_interval,
    )

    # Espacement des appels TMDB (flux le plus sollicite)
    tmdb_rate_controller = providers.Singleton(
        RateController,
        min_interval=config.provided.rate_limit_interval,
    )

    mirror_resolver = providers.Singleton(
        MirrorResolver,
        fetch=fetcher.provided.fetch,
    )

    # Clients externes
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        fetcher=fetcher,
        rate_controller=tmdb_rate_controller,
        max_attempts=config.provided.retry_max_attempts,
        language=config.provided.tmdb_language,
        base_url=config.provided.tmdb_base_url,
        rate_limit_delay=config.provided.retry_rate_limit_delay,
        server_error_delay=config.provided.retry_server_error_delay,
    )

    channel_directory = providers.Singleton(
        ChannelDirectoryClient,
        resolver=mirror_resolver,
        cache=api_cache,
        stream_cache=stream_cache,
        channel_mirrors=config.provided.channel_mirrors,
        stream_mirrors=config.provided.stream_mirrors,
    )

    backend_client = providers.Singleton(
        FederatedBackendClient,
        base_url=config.provided.backend_url,
        api_key=config.provided.backend_api_key,
        fetcher=fetcher,
        max_attempts=config.provided.retry_max_attempts,
        timeout=config.provided.request_timeout,
        rate_limit_delay=config.provided.retry_rate_limit_delay,
        server_error_delay=config.provided.retry_server_error_delay,
    )

    # Notifications de changement du backend
    change_feed = providers.Singleton(ChangeFeed)

    # Recherche federee
    federated_aggregator = providers.Singleton(
        FederatedAggregator,
        backend=backend_client,
        cache=api_cache,
        per_source_limit=config.provided.per_source_limit,
    )
