"""
Recherche federee sur l'ensemble des sources de contenu actives.

FederatedAggregator maintient la liste des sources actives (rechargee a la
demande ou sur notification de changement), diffuse chaque recherche a toutes
les sources retenues, fusionne les resultats et les pagine.

Etats:
    IDLE -> LOADING_SOURCES -> READY
    READY -> IDLE sur invalidation (la prochaine recherche recharge la liste)

Responsabilites:
- Ne jamais faire contribuer une source inactive
- Isoler l'echec d'une source (contribution vide) sans faire echouer le tout
- Lever AggregateFailure si aucune source n'est exploitable ou si toutes
  les sources interrogees ont echoue sans resultat
- Router une demande de details vers la seule source concernee
"""

import asyncio
import dataclasses
from enum import Enum
from typing import Iterable, Optional, Sequence

from loguru import logger

from cinestream.adapters.api.cache import TTLCache
from cinestream.adapters.api.change_feed import ChangeFeed, ChangeNotification
from cinestream.adapters.api.errors import AggregateFailure, FetchError
from cinestream.core.entities.content import (
    AggregatedContentItem,
    ContentSource,
    SearchPage,
)
from cinestream.core.ports.api_clients import IFederatedBackend


class AggregatorState(Enum):
    """Etat de la liste des sources."""

    IDLE = "idle"
    LOADING_SOURCES = "loading_sources"
    READY = "ready"


def merge_results(
    per_source: Sequence[Sequence[AggregatedContentItem]],
) -> list[AggregatedContentItem]:
    """
    Fusionne les resultats de plusieurs sources.

    Entrelacement tour a tour dans l'ordre des sources, pour que chaque
    source soit representee des la premiere page; les doublons (meme source,
    meme id) sont ignores.

    Args:
        per_source: Resultats de chaque source, dans l'ordre des sources

    Returns:
        Liste fusionnee sans doublon
    """
    merged: list[AggregatedContentItem] = []
    seen: set[tuple[str, str]] = set()
    longest = max((len(items) for items in per_source), default=0)
    for rank in range(longest):
        for items in per_source:
            if rank < len(items) and items[rank].key not in seen:
                seen.add(items[rank].key)
                merged.append(items[rank])
    return merged


class FederatedAggregator:
    """
    Agregateur de recherche sur les sources federees.

    Attributes:
        DEFAULT_PER_SOURCE_LIMIT: Nombre maximum de resultats demandes par source

    Example:
        aggregator = FederatedAggregator(backend=backend, cache=cache)
        aggregator.attach(change_feed)

        page = await aggregator.search("dune", page=1, page_size=20)
        for item in page.items:
            print(item.title, item.source_id)

        details = await aggregator.get_details(item.id, item.source_id)
    """

    DEFAULT_PER_SOURCE_LIMIT = 50

    def __init__(
        self,
        backend: IFederatedBackend,
        cache: TTLCache,
        per_source_limit: int = DEFAULT_PER_SOURCE_LIMIT,
    ) -> None:
        """
        Initialise l'agregateur.

        Args:
            backend: Backend exposant les sources et la recherche par source
            cache: Cache des resultats fusionnes et des details
            per_source_limit: Resultats demandes a chaque source
        """
        self._backend = backend
        self._cache = cache
        self._per_source_limit = per_source_limit
        self._sources: list[ContentSource] = []
        self._state = AggregatorState.IDLE
        self._generation = 0
        self._sources_generation = 0
        self._loading: Optional[asyncio.Task] = None
        self._loading_generation = 0

    @property
    def state(self) -> AggregatorState:
        return self._state

    @property
    def sources(self) -> tuple[ContentSource, ...]:
        """Instantane de la liste des sources actives."""
        return tuple(self._sources)

    # ------------------------------------------------------------------
    # Liste des sources
    # ------------------------------------------------------------------

    async def sync_sources(self, force: bool = False, remote: bool = False) -> list[ContentSource]:
        """
        Charge la liste des sources actives si necessaire.

        Les appels concurrents partagent un seul chargement.

        Args:
            force: Recharge meme si la liste est a jour
            remote: Demande d'abord au backend de resynchroniser ses sources

        Returns:
            Sources actives, triees par nom
        """
        if remote:
            await self._backend.sync_sources()
            self.invalidate()

        _, sources = await self._current_sources(force)
        return sources

    async def _current_sources(self, force: bool = False) -> tuple[int, list[ContentSource]]:
        """Retourne la liste active et la generation a laquelle elle a ete chargee."""
        if self._state is AggregatorState.READY and not force:
            return self._sources_generation, list(self._sources)

        # Un chargement lance avant une invalidation n'est jamais partage
        if self._loading is None or self._loading_generation != self._generation:
            self._loading_generation = self._generation
            self._loading = asyncio.ensure_future(self._load_sources(self._generation))
        return await asyncio.shield(self._loading)

    async def _load_sources(self, generation: int) -> tuple[int, list[ContentSource]]:
        self._state = AggregatorState.LOADING_SOURCES
        try:
            sources = await self._backend.get_sources()
        except BaseException:
            if self._loading is asyncio.current_task():
                self._state = AggregatorState.IDLE
            raise
        finally:
            if self._loading is asyncio.current_task():
                self._loading = None

        enabled = sorted((s for s in sources if s.enabled), key=lambda s: s.name.lower())
        logger.info(f"Sources federees: {len(enabled)} active(s) sur {len(sources)}")
        # Une liste chargee avant une invalidation ne remplace pas l'etat courant
        if generation == self._generation:
            self._sources = enabled
            self._sources_generation = generation
            self._state = AggregatorState.READY
        return generation, list(enabled)

    def invalidate(self) -> None:
        """
        Marque la liste des sources et les resultats en cache comme perimes.

        Les recherches deja lancees se terminent sur l'ancienne liste; les
        suivantes attendent un nouveau chargement.
        """
        self._generation += 1
        self._state = AggregatorState.IDLE

    def handle_change(self, notification: ChangeNotification) -> None:
        """Callback de notification: toute modification invalide l'etat."""
        logger.info(
            f"Changement {notification.event.value} sur {notification.record_type.name}, "
            "invalidation des sources"
        )
        self.invalidate()

    def attach(self, feed: ChangeFeed):
        """Abonne l'agregateur a un flux de notifications (retourne le desabonnement)."""
        return feed.subscribe(self.handle_change)

    # ------------------------------------------------------------------
    # Recherche
    # ------------------------------------------------------------------

    @staticmethod
    def _select(
        sources: Iterable[ContentSource],
        source_filter: Optional[Iterable[str]],
        language: Optional[str],
    ) -> list[ContentSource]:
        wanted = set(source_filter) if source_filter is not None else None
        selected = []
        for source in sources:
            if not source.enabled:
                continue
            if wanted is not None and source.id not in wanted and source.name not in wanted:
                continue
            if language and source.language and source.language.lower() != language.lower():
                continue
            selected.append(source)
        return selected

    async def _search_source(
        self, source: ContentSource, query: str, language: Optional[str]
    ) -> list[AggregatedContentItem]:
        result = await self._backend.search_content(
            query,
            [source.id],
            language=language,
            page=1,
            page_size=self._per_source_limit,
        )
        # La provenance est toujours la source interrogee
        return [
            item if item.source_id == source.id else dataclasses.replace(item, source_id=source.id)
            for item in result.items
        ]

    async def _fan_out(
        self, query: str, sources: Sequence[ContentSource], language: Optional[str]
    ) -> tuple[list[AggregatedContentItem], dict[str, Exception]]:
        outcomes = await asyncio.gather(
            *(self._search_source(source, query, language) for source in sources),
            return_exceptions=True,
        )

        per_source: list[list[AggregatedContentItem]] = []
        failures: dict[str, Exception] = {}
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Source {source.name} en echec: {outcome}")
                failures[source.id] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                per_source.append(outcome)
        return merge_results(per_source), failures

    @staticmethod
    def _search_key(
        generation: int, query: str, sources: Sequence[ContentSource], language: Optional[str]
    ) -> str:
        source_ids = ",".join(source.id for source in sources)
        return f"federated:search:{generation}:{language or '*'}:{source_ids}:{query.strip().lower()}"

    async def search(
        self,
        query: str,
        source_filter: Optional[Iterable[str]] = None,
        language: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> SearchPage:
        """
        Recherche dans toutes les sources actives retenues.

        Args:
            query: Texte recherche
            source_filter: Identifiants (ou noms) des sources a interroger, toutes si None
            language: Ne retient que les sources de cette langue (ou sans langue)
            page: Numero de page (commence a 1)
            page_size: Nombre d'elements par page

        Returns:
            Page de resultats fusionnes, avec les sources en echec

        Raises:
            ValueError: Si page ou page_size est invalide
            AggregateFailure: Si aucune source n'est exploitable ou si toutes
                les sources interrogees ont echoue sans resultat
        """
        if page < 1 or page_size < 1:
            raise ValueError("page et page_size doivent etre >= 1")

        try:
            generation, sources = await self._current_sources()
        except FetchError as e:
            logger.error(f"Liste des sources indisponible: {e}")
            raise AggregateFailure(
                "Liste des sources indisponible",
                errors={"sources": e},
                page=SearchPage.empty(page),
            ) from e

        candidates = self._select(sources, source_filter, language)
        if not candidates:
            logger.error("Recherche federee: aucune source exploitable")
            raise AggregateFailure("Aucune source exploitable", page=SearchPage.empty(page))

        cache_key = self._search_key(generation, query, candidates, language)
        merged = await self._cache.peek(cache_key)
        failures: dict[str, Exception] = {}
        if merged is None:
            merged, failures = await self._fan_out(query, candidates, language)
            if not merged and failures:
                logger.error(f"Recherche federee: {len(failures)} source(s) en echec, aucun resultat")
                raise AggregateFailure(
                    "Toutes les sources interrogees ont echoue",
                    errors=failures,
                    page=SearchPage.empty(page),
                )
            # Resultat partiel ou obtenu sur une liste perimee: pas de cache
            if not failures and generation == self._generation:
                await self._cache.set(cache_key, merged)

        start = (page - 1) * page_size
        end = start + page_size
        return SearchPage(
            items=merged[start:end],
            has_more=end < len(merged),
            total_results=len(merged),
            failed_sources=tuple(failures),
            page=page,
        )

    async def get_details(
        self, content_id: str, source_id: str, force_fresh: bool = False
    ) -> Optional[AggregatedContentItem]:
        """
        Recupere les details d'un contenu aupres de sa seule source.

        Args:
            content_id: Identifiant du contenu dans la source
            source_id: Identifiant (ou nom) de la source d'origine
            force_fresh: Ignore le cache

        Returns:
            Details du contenu, ou None si la source est inconnue, inactive,
            ou ne connait pas ce contenu
        """
        sources = await self.sync_sources()
        source = next((s for s in sources if source_id in (s.id, s.name)), None)
        if source is None:
            logger.info(f"Source inconnue ou inactive: {source_id}")
            return None

        return await self._cache.get(
            f"federated:details:{source.id}:{content_id}",
            lambda: self._backend.get_content_details(content_id, source.id),
            force_fresh=force_fresh,
        )
