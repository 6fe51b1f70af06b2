"""
Entites du catalogue federe.

Sources de contenu (plugins tiers), depots qui les publient, et elements de
contenu agreges depuis plusieurs sources.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


def _optional_number(value: Any, convert):
    """Convertit une valeur numerique facultative (None si absente ou illisible)."""
    if value is None or value == "":
        return None
    try:
        return convert(value)
    except (TypeError, ValueError):
        return None


class MediaKind(Enum):
    """Nature d'un element de contenu."""

    MOVIE = "movie"
    SERIES = "series"

    @classmethod
    def parse(cls, value: Optional[str]) -> "MediaKind":
        """Convertit une valeur brute ("tv" et "series" -> SERIES, defaut MOVIE)."""
        if value in ("series", "tv"):
            return cls.SERIES
        return cls.MOVIE


@dataclass(frozen=True)
class ContentSource:
    """
    Source de contenu federee, activable independamment.

    Attributes:
        id: Identifiant de la source
        name: Nom affiche
        base_url: URL de base du fournisseur
        repository: Identifiant du depot proprietaire
        enabled: Source active (une source inactive ne contribue jamais)
        categories: Etiquettes de categorie (movies, series, anime...)
        language: Code langue, None si multilingue
        logo: URL du logo
        description: Description libre
    """

    id: str
    name: str
    base_url: str
    repository: str = ""
    enabled: bool = True
    categories: tuple[str, ...] = ()
    language: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ContentSource":
        """Construit une source depuis une ligne de la table des sources."""
        enabled = row.get("is_enabled")
        return cls(
            id=str(row.get("id") or row.get("name")),
            name=row.get("name", ""),
            base_url=row.get("url", ""),
            repository=row.get("repo") or "",
            enabled=True if enabled is None else bool(enabled),
            categories=tuple(row.get("categories") or ()),
            language=row.get("language"),
            logo=row.get("logo"),
            description=row.get("description"),
        )

    def to_row(self) -> dict[str, Any]:
        """Forme ligne attendue par la synchronisation des sources."""
        return {
            "name": self.name,
            "url": self.base_url,
            "logo": self.logo,
            "language": self.language,
            "categories": list(self.categories),
            "repo": self.repository,
            "description": self.description,
        }


@dataclass(frozen=True)
class Repository:
    """Depot publiant des plugins (sources)."""

    id: str
    name: str
    url: str
    author: Optional[str] = None
    description: Optional[str] = None
    enabled: bool = True
    last_synced: Optional[str] = None
    plugin_count: Optional[int] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Repository":
        enabled = row.get("is_enabled")
        return cls(
            id=str(row.get("id") or row.get("name")),
            name=row.get("name", ""),
            url=row.get("url", ""),
            author=row.get("author"),
            description=row.get("description"),
            enabled=True if enabled is None else bool(enabled),
            last_synced=row.get("last_synced"),
            plugin_count=row.get("plugin_count"),
        )


@dataclass(frozen=True)
class Plugin:
    """Plugin installable depuis un depot."""

    id: str
    name: str
    url: str
    repository: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    categories: tuple[str, ...] = ()
    enabled: bool = True
    installed: bool = False

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Plugin":
        return cls(
            id=str(row.get("id") or row.get("name")),
            name=row.get("name", ""),
            url=row.get("url", ""),
            repository=row.get("repository"),
            version=row.get("version"),
            author=row.get("author"),
            language=row.get("language"),
            categories=tuple(row.get("categories") or ()),
            enabled=bool(row.get("is_enabled", True)),
            installed=bool(row.get("is_installed", False)),
        )


@dataclass(frozen=True)
class AggregatedContentItem:
    """
    Element de contenu issu d'une source federee.

    Porte l'identifiant de sa source pour router une recuperation de details
    ulterieure vers la bonne source.

    Attributes:
        id: Identifiant dans la source
        source_id: Identifiant de la source d'origine
        title: Titre
        kind: Film ou serie
        year: Annee de sortie
        poster: URL de l'affiche
        backdrop: URL de l'image de fond
        rating: Note
        plot: Synopsis
        external_id: Identifiant externe (ex: IMDB)
        url: Lien vers le contenu chez la source
    """

    id: str
    source_id: str
    title: str
    kind: MediaKind = MediaKind.MOVIE
    year: Optional[int] = None
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    rating: Optional[float] = None
    plot: Optional[str] = None
    external_id: Optional[str] = None
    url: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        """Cle de deduplication (source, id)."""
        return (self.source_id, self.id)

    @classmethod
    def from_payload(
        cls, payload: dict[str, Any], source_id: Optional[str] = None
    ) -> "AggregatedContentItem":
        """Construit un element depuis une reponse du backend."""
        year = payload.get("year")
        rating = payload.get("rating")
        return cls(
            id=str(payload["id"]),
            source_id=str(source_id or payload.get("source_id") or payload.get("source") or ""),
            title=payload.get("title", ""),
            kind=MediaKind.parse(payload.get("type")),
            year=_optional_number(year, int),
            poster=payload.get("poster"),
            backdrop=payload.get("backdrop"),
            rating=_optional_number(rating, float),
            plot=payload.get("plot"),
            external_id=payload.get("external_id"),
            url=payload.get("url"),
        )


@dataclass(frozen=True)
class ContentSearchResult:
    """Reponse d'une source a une recherche."""

    items: tuple[AggregatedContentItem, ...] = ()
    has_more: bool = False
    total_results: Optional[int] = None


@dataclass(frozen=True)
class RepositoryParseResult:
    """Plugins et sources decouverts en analysant un depot."""

    plugins: tuple[Plugin, ...] = ()
    sources: tuple[ContentSource, ...] = ()


@dataclass
class SearchPage:
    """
    Page de resultats d'une recherche federee.

    Attributes:
        items: Elements de la page, avec leur source d'origine
        has_more: True si d'autres pages existent
        total_results: Nombre total d'elements fusionnes
        failed_sources: Sources en echec pendant la recherche
        page: Numero de page (commence a 1)
    """

    items: list[AggregatedContentItem] = field(default_factory=list)
    has_more: bool = False
    total_results: int = 0
    failed_sources: tuple[str, ...] = ()
    page: int = 1

    @classmethod
    def empty(cls, page: int = 1) -> "SearchPage":
        return cls(page=page)
