"""
Client de l'annuaire communautaire de chaines (iptv-org).

L'annuaire publie deux documents JSON statiques (chaines et flux), chacun
servi par un miroir principal et un miroir de secours. Les listes sont mises
en cache; la resolution du flux d'une chaine passe par le cache de session
(vide en bloc toutes les 30 minutes, single-flight).

Les erreurs remontent typees a l'appelant: une liste vide signifie toujours
"aucune chaine", jamais "annuaire injoignable".

Usage:
    client = ChannelDirectoryClient(resolver, cache, stream_cache)
    channels = await client.fetch_indian_channels()
    resolution = await client.get_stream_for_channel("ZeeTV.in")
"""

from typing import Optional, Sequence

from loguru import logger

from cinestream.adapters.api.cache import TTLCache
from cinestream.adapters.api.fetch import parse_rows
from cinestream.adapters.api.mirrors import MirrorResolver
from cinestream.adapters.api.stream_cache import StreamSessionCache
from cinestream.core.entities.channel import Channel, Stream, StreamResolution

CHANNEL_MIRRORS = (
    "https://iptv-org.github.io/api/channels.json",
    "https://raw.githubusercontent.com/iptv-org/api/gh-pages/channels.json",
)
STREAM_MIRRORS = (
    "https://iptv-org.github.io/api/streams.json",
    "https://raw.githubusercontent.com/iptv-org/api/gh-pages/streams.json",
)

# Langues des chaines indiennes (codes ISO 639-3)
INDIAN_LANGUAGES = frozenset({"hin", "tam", "tel", "mal", "kan", "ben", "mar", "guj"})
INDIAN_BROADCAST_AREAS = frozenset({"India", "c/IN"})


def is_indian_channel(channel: Channel) -> bool:
    """
    Indique si une chaine vise le public indien.

    Une chaine est retenue si elle est diffusee en Inde, enregistree en Inde,
    ou emet dans une langue indienne.
    """
    return (
        channel.country == "IN"
        or any(area in INDIAN_BROADCAST_AREAS for area in channel.broadcast_area)
        or any(lang in INDIAN_LANGUAGES for lang in channel.languages)
    )


class ChannelDirectoryClient:
    """
    Acces a l'annuaire des chaines et flux en direct.

    Attributes:
        CHANNELS_CACHE_KEY: Cle de cache de la liste des chaines
        STREAMS_CACHE_KEY: Cle de cache de la liste des flux
    """

    CHANNELS_CACHE_KEY = "iptv:channels"
    STREAMS_CACHE_KEY = "iptv:streams"

    def __init__(
        self,
        resolver: MirrorResolver,
        cache: TTLCache,
        stream_cache: StreamSessionCache,
        channel_mirrors: Sequence[str] = CHANNEL_MIRRORS,
        stream_mirrors: Sequence[str] = STREAM_MIRRORS,
    ) -> None:
        """
        Initialise le client.

        Args:
            resolver: Resolveur multi-miroirs
            cache: Cache des listes
            stream_cache: Cache de session des flux resolus
            channel_mirrors: URLs equivalentes de la liste des chaines
            stream_mirrors: URLs equivalentes de la liste des flux
        """
        self._resolver = resolver
        self._cache = cache
        self._stream_cache = stream_cache
        self._channel_mirrors = tuple(channel_mirrors)
        self._stream_mirrors = tuple(stream_mirrors)

    async def fetch_channels(self, force_fresh: bool = False) -> list[Channel]:
        """Retourne toutes les chaines de l'annuaire."""

        async def load() -> list[Channel]:
            payload = await self._resolver.resolve(self._channel_mirrors)
            channels = parse_rows(payload, Channel.from_payload, "Annuaire (chaines)")
            logger.info(f"Annuaire: {len(channels)} chaines chargees")
            return channels

        return await self._cache.get(self.CHANNELS_CACHE_KEY, load, force_fresh=force_fresh)

    async def fetch_streams(self, force_fresh: bool = False) -> list[Stream]:
        """Retourne tous les flux de l'annuaire."""

        async def load() -> list[Stream]:
            payload = await self._resolver.resolve(self._stream_mirrors)
            streams = [
                stream
                for stream in parse_rows(payload, Stream.from_payload, "Annuaire (flux)")
                if stream.url
            ]
            logger.info(f"Annuaire: {len(streams)} flux charges")
            return streams

        return await self._cache.get(self.STREAMS_CACHE_KEY, load, force_fresh=force_fresh)

    async def fetch_indian_channels(self) -> list[Channel]:
        """Retourne les chaines diffusees en Inde ou en langue indienne."""
        channels = await self.fetch_channels()
        return [channel for channel in channels if is_indian_channel(channel)]

    async def get_channels_by_category(self, category: str) -> list[Channel]:
        """Retourne les chaines d'une categorie (ex: "news", "movies")."""
        channels = await self.fetch_channels()
        return [channel for channel in channels if category in channel.categories]

    async def _resolve_stream(self, channel_id: str) -> Optional[StreamResolution]:
        streams = await self.fetch_streams()
        for stream in streams:
            if stream.channel == channel_id:
                return StreamResolution(channel_id=channel_id, url=stream.url, stream=stream)
        logger.debug(f"Aucun flux pour la chaine {channel_id}")
        return None

    async def get_stream_for_channel(self, channel_id: str) -> Optional[StreamResolution]:
        """
        Resout le flux lisible d'une chaine.

        Args:
            channel_id: Identifiant de la chaine

        Returns:
            Flux resolu, ou None si la chaine n'a aucun flux
        """
        return await self._stream_cache.resolve(channel_id, self._resolve_stream)

    async def close(self) -> None:
        """Arrete le vidage periodique du cache de session."""
        await self._stream_cache.stop()

    async def __aenter__(self) -> "ChannelDirectoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
