"""
Clients API externes et primitives de resilience.

Ce module fournit les adaptateurs pour communiquer avec les sources externes:
- TMDB: metadonnees films et series
- iptv-org: annuaire des chaines et flux en direct (miroirs)
- Backend federe: sources de contenu tierces (RPC par action)

Infrastructure partagee:
- Fetcher: une requete, un timeout, une erreur typee
- RateController: espacement minimal entre appels d'un meme flux
- with_retry: relance par classe d'erreur (429, 500/503, timeout)
- TTLCache: cache borne avec fenetre de fraicheur (15 min)
- MirrorResolver: premiere URL equivalente qui repond
- StreamSessionCache: flux resolus, vides en bloc toutes les 30 minutes
"""

from cinestream.adapters.api.cache import TTLCache
from cinestream.adapters.api.errors import (
    AggregateFailure,
    FetchError,
    HTTPError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)
from cinestream.adapters.api.fetch import Fetcher
from cinestream.adapters.api.mirrors import MirrorResolver
from cinestream.adapters.api.rate_limit import RateController, throttled
from cinestream.adapters.api.retry import request_with_retry, with_retry
from cinestream.adapters.api.stream_cache import StreamSessionCache

__all__ = [
    "AggregateFailure",
    "FetchError",
    "Fetcher",
    "HTTPError",
    "MirrorResolver",
    "NetworkError",
    "RateController",
    "RateLimitError",
    "RequestTimeoutError",
    "StreamSessionCache",
    "TTLCache",
    "request_with_retry",
    "throttled",
    "with_retry",
]
