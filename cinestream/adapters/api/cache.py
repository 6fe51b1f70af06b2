"""
Cache borne avec fenetre de fraicheur pour les appels API.

Le cache utilise diskcache comme stockage borne (size_limit + eviction LRU).
La fraicheur est calculee ici a partir de l'horodatage de chaque entree, ce qui
permet d'injecter une horloge dans les tests et de forcer un rechargement.

Les valeurs sont serialisees par diskcache: un appelant recoit toujours une
copie, jamais une reference sur l'entree stockee.

TTL par defaut:
- METADATA_TTL: 15 minutes pour les metadonnees (films, series, chaines)
"""

import asyncio
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from diskcache import Cache
from loguru import logger

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """
    Entree stockee dans le cache.

    Attributes:
        value: Valeur mise en cache
        stored_at: Horodatage du stockage (selon l'horloge du cache)
    """

    value: V
    stored_at: float


class TTLCache:
    """
    Cache asynchrone cle -> valeur avec fenetre de fraicheur.

    Utilise run_in_executor pour que les operations diskcache ne bloquent
    pas la boucle d'evenements.

    Attributes:
        METADATA_TTL: Fenetre de fraicheur par defaut (15 minutes)
        DEFAULT_SIZE_LIMIT: Taille maximale du stockage (64 Mo)

    Example:
        cache = TTLCache(ttl=900)
        movie = await cache.get("tmdb:movie:550", lambda: client.load(550))
        movie = await cache.get("tmdb:movie:550", loader, force_fresh=True)
    """

    METADATA_TTL = 15 * 60  # 15 minutes en secondes (900)
    DEFAULT_SIZE_LIMIT = 64 * 1024 * 1024

    def __init__(
        self,
        ttl: float = METADATA_TTL,
        directory: Optional[str] = None,
        size_limit: int = DEFAULT_SIZE_LIMIT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialise le cache.

        Args:
            ttl: Fenetre de fraicheur en secondes
            directory: Repertoire de stockage (temporaire et prive si None)
            size_limit: Taille maximale en octets avant eviction LRU
            clock: Horloge (injectable pour les tests)
        """
        if ttl <= 0:
            raise ValueError("ttl doit etre strictement positif")
        self.ttl = ttl
        self._clock = clock
        self._cache = Cache(
            directory,
            size_limit=size_limit,
            eviction_policy="least-recently-used",
        )

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at < self.ttl

    async def get(
        self,
        key: str,
        loader: Callable[[], Awaitable[V]],
        force_fresh: bool = False,
    ) -> V:
        """
        Retourne la valeur fraiche associee a la cle, ou la recalcule.

        Args:
            key: Cle unique (ex: "tmdb:movie:550")
            loader: Fonction async produisant une valeur fraiche
            force_fresh: Ignore l'entree existante et recalcule toujours

        Returns:
            Valeur en cache si fraiche, sinon valeur produite par loader

        Raises:
            Toute erreur du loader (le cache n'est alors pas modifie)
        """
        if not force_fresh:
            entry = await self._run(self._cache.get, key)
            if entry is not None and self._is_fresh(entry):
                logger.debug(f"Cache hit: {key}")
                return entry.value

        logger.debug(f"Cache {'refresh' if force_fresh else 'miss'}: {key}")
        value = await loader()
        await self.set(key, value)
        return value

    async def peek(self, key: str) -> Optional[Any]:
        """Retourne la valeur si elle est fraiche, None sinon (sans recalcul)."""
        entry = await self._run(self._cache.get, key)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.value

    async def set(self, key: str, value: Any) -> None:
        """Stocke une valeur, horodatee maintenant, en remplacant l'ancienne."""
        entry = CacheEntry(value=value, stored_at=self._clock())
        await self._run(self._cache.set, key, entry)

    async def invalidate(self, key: str) -> None:
        """Supprime une entree (sans erreur si absente)."""
        await self._run(self._cache.delete, key)

    async def invalidate_prefix(self, prefix: str) -> int:
        """
        Supprime toutes les entrees dont la cle commence par le prefixe.

        Returns:
            Nombre d'entrees supprimees
        """
        return await self._run(self._delete_matching, lambda k, _: k.startswith(prefix))

    async def sweep(self) -> int:
        """
        Supprime les entrees perimees.

        Returns:
            Nombre d'entrees supprimees
        """
        removed = await self._run(
            self._delete_matching, lambda _, entry: not self._is_fresh(entry)
        )
        if removed:
            logger.debug(f"Cache sweep: {removed} entree(s) perimee(s) supprimee(s)")
        return removed

    def _delete_matching(self, predicate: Callable[[str, CacheEntry], bool]) -> int:
        removed = 0
        for key in list(self._cache.iterkeys()):
            entry = self._cache.get(key)
            if entry is not None and predicate(key, entry):
                if self._cache.delete(key):
                    removed += 1
        return removed

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        await self._run(self._cache.clear)

    def __len__(self) -> int:
        return len(self._cache)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
