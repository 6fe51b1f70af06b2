"""
Cache de session pour la resolution des flux de chaines en direct.

Contrairement au TTLCache, les entrees n'expirent pas individuellement: une
tache de fond vide entierement le cache a intervalle fixe (30 minutes), car
les URLs de flux changent de facon imprevisible.

Les resolutions concurrentes d'une meme chaine partagent un seul appel
(single-flight): tous les appelants recoivent le meme resultat ou la meme
erreur.

Usage:
    async with StreamSessionCache(clear_interval=1800) as cache:
        resolution = await cache.resolve("ZeeTV.in", resolver)
"""

import asyncio
import contextlib
from typing import Awaitable, Callable, Optional

from loguru import logger

from cinestream.core.entities.channel import StreamResolution

Resolver = Callable[[str], Awaitable[Optional[StreamResolution]]]


class StreamSessionCache:
    """
    Table chaine -> flux resolu, videe en bloc periodiquement.

    Attributes:
        DEFAULT_CLEAR_INTERVAL: Intervalle de vidage par defaut (30 minutes)
    """

    DEFAULT_CLEAR_INTERVAL = 30 * 60

    def __init__(self, clear_interval: float = DEFAULT_CLEAR_INTERVAL) -> None:
        """
        Initialise le cache (la tache de vidage demarre avec start() ou a la
        premiere ecriture dans une boucle asyncio).

        Args:
            clear_interval: Intervalle entre deux vidages complets (secondes)
        """
        if clear_interval <= 0:
            raise ValueError("clear_interval doit etre strictement positif")
        self.clear_interval = clear_interval
        self._entries: dict[str, StreamResolution] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self._generation = 0
        self._clear_task: Optional[asyncio.Task] = None

    def get(self, channel_id: str) -> Optional[StreamResolution]:
        """Retourne le flux resolu pour la chaine, ou None."""
        return self._entries.get(channel_id)

    def set(self, channel_id: str, resolution: StreamResolution) -> None:
        """Enregistre le flux resolu pour la chaine (demarre le vidage si besoin)."""
        self._entries[channel_id] = resolution
        self._ensure_started()

    def clear(self) -> None:
        """Vide entierement le cache."""
        self._entries.clear()
        self._generation += 1

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._entries

    @property
    def running(self) -> bool:
        """True si la tache de vidage periodique est active."""
        return self._clear_task is not None and not self._clear_task.done()

    def start(self) -> None:
        """Demarre la tache de vidage periodique (sans effet si deja active)."""
        if self.running:
            return
        self._clear_task = asyncio.get_running_loop().create_task(
            self._clear_periodically()
        )

    def _ensure_started(self) -> None:
        # Hors boucle (usage synchrone), le vidage demarrera a la prochaine ecriture
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self.running and self._clear_task.get_loop() is loop:
            return
        self._clear_task = loop.create_task(self._clear_periodically())
        logger.debug(f"Vidage periodique du cache des flux demarre ({self.clear_interval}s)")

    async def stop(self) -> None:
        """Arrete la tache de vidage periodique."""
        if self._clear_task is None:
            return
        self._clear_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._clear_task
        self._clear_task = None

    async def _clear_periodically(self) -> None:
        while True:
            await asyncio.sleep(self.clear_interval)
            count = len(self._entries)
            self.clear()
            logger.debug(f"Cache des flux vide ({count} entree(s))")

    async def resolve(self, channel_id: str, resolver: Resolver) -> Optional[StreamResolution]:
        """
        Retourne le flux de la chaine, en le resolvant si necessaire.

        Les appels concurrents pour une meme chaine partagent une seule
        resolution. Une erreur est transmise a tous les appelants et n'est pas
        mise en cache; un resultat None n'est pas mis en cache non plus.

        Args:
            channel_id: Identifiant de la chaine
            resolver: Fonction async qui resout le flux d'une chaine

        Returns:
            Flux resolu, ou None si la chaine n'a pas de flux
        """
        cached = self._entries.get(channel_id)
        if cached is not None:
            return cached

        task = self._in_flight.get(channel_id)
        if task is None:
            task = asyncio.ensure_future(
                self._resolve_and_store(channel_id, resolver, self._generation)
            )
            self._in_flight[channel_id] = task
        else:
            logger.debug(f"Resolution deja en cours pour {channel_id}, partage du resultat")
        return await asyncio.shield(task)

    async def _resolve_and_store(
        self, channel_id: str, resolver: Resolver, generation: int
    ) -> Optional[StreamResolution]:
        try:
            resolution = await resolver(channel_id)
            # Un vidage pendant la resolution invalide ce resultat pour le cache
            if resolution is not None and generation == self._generation:
                self.set(channel_id, resolution)
            return resolution
        finally:
            self._in_flight.pop(channel_id, None)

    async def __aenter__(self) -> "StreamSessionCache":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
