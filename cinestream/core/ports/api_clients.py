"""
Interfaces ports pour les clients API.

Interfaces abstraites (ports) définissant les contrats pour les sources externes.
Les implémentations (adaptateurs) fournissent les clients concrets
(TMDB pour les métadonnées, backend géré pour le catalogue fédéré).
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from cinestream.core.entities.content import (
    AggregatedContentItem,
    ContentSearchResult,
    ContentSource,
)
from cinestream.core.entities.media import MediaDetails, MediaPage


class IMediaAPIClient(ABC):
    """
    Interface de base pour les APIs de métadonnées média.

    Définit le contrat pour rechercher et récupérer des informations média
    (films et séries) depuis une API externe.
    """

    @abstractmethod
    async def search_multi(
        self, query: str, page: int = 1, force_fresh: bool = False
    ) -> MediaPage:
        """
        Recherche des films et séries par titre.

        Args :
            query : Requête de recherche (titre)
            page : Numéro de page (commence à 1)
            force_fresh : Ignore le cache et recharge depuis l'API

        Retourne :
            Page de résultats (personnes exclues)
        """
        ...

    @abstractmethod
    async def get_movie_details(
        self, movie_id: int, force_fresh: bool = False
    ) -> Optional[MediaDetails]:
        """Détails complets d'un film, ou None si non trouvé."""
        ...

    @abstractmethod
    async def get_tv_details(
        self, tv_id: int, force_fresh: bool = False
    ) -> Optional[MediaDetails]:
        """Détails complets d'une série, ou None si non trouvée."""
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant de la source API (ex: 'tmdb')."""
        ...


class IFederatedBackend(ABC):
    """
    Interface du backend géré qui expose les sources fédérées.

    Le backend centralise la liste des sources (administrables) et relaie
    les recherches et demandes de détails vers chaque source.
    """

    @abstractmethod
    async def get_sources(self) -> list[ContentSource]:
        """Retourne toutes les sources connues, actives ou non."""
        ...

    @abstractmethod
    async def sync_sources(self) -> bool:
        """Demande au backend de resynchroniser ses sources depuis les dépôts."""
        ...

    @abstractmethod
    async def search_content(
        self,
        query: str,
        sources: Sequence[str],
        language: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ContentSearchResult:
        """
        Recherche du contenu dans les sources indiquées.

        Args :
            query : Texte recherché
            sources : Identifiants des sources à interroger
            language : Filtre de langue optionnel
            page : Numéro de page
            page_size : Taille de page

        Retourne :
            Résultats de la recherche pour ces sources
        """
        ...

    @abstractmethod
    async def get_content_details(
        self, content_id: str, source_id: str
    ) -> Optional[AggregatedContentItem]:
        """Détails d'un contenu auprès de sa source, ou None si introuvable."""
        ...
