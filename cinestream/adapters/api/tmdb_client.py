"""
Client TMDB pour les listes, la recherche et les details films/series.

Implemente l'interface IMediaAPIClient pour TMDB (The Movie Database).
Chaque appel suit la chaine: cache -> rate controller -> retry -> fetch.

Usage:
    client = TMDBClient(api_key="your_key", cache=cache, fetcher=fetcher,
                        rate_controller=RateController(0.1))
    page = await client.get_trending_movies()
    details = await client.get_movie_details(550)
    details = await client.get_movie_details(550, force_fresh=True)
"""

from typing import Any, Optional

from loguru import logger

from cinestream.adapters.api.cache import TTLCache
from cinestream.adapters.api.errors import HTTPError
from cinestream.adapters.api.fetch import Fetcher
from cinestream.adapters.api.mirrors import parse_json
from cinestream.adapters.api.rate_limit import RateController
from cinestream.adapters.api.retry import (
    RATE_LIMIT_DELAY,
    SERVER_ERROR_DELAY,
    request_with_retry,
)
from cinestream.core.entities.content import MediaKind
from cinestream.core.entities.media import (
    CastMember,
    Credits,
    Episode,
    MediaDetails,
    MediaPage,
    MediaSummary,
    Season,
)
from cinestream.core.ports.api_clients import IMediaAPIClient
from cinestream.core.value_objects.request import RequestDescriptor


def _parse_year(date_value: Optional[str]) -> Optional[int]:
    """Extrait l'annee d'une date TMDB (format YYYY-MM-DD)."""
    if date_value and len(date_value) >= 4 and date_value[:4].isdigit():
        return int(date_value[:4])
    return None


def _path_segment(kind: MediaKind) -> str:
    return "tv" if kind is MediaKind.SERIES else "movie"


class TMDBClient(IMediaAPIClient):
    """
    Client API TMDB pour les metadonnees de films et series.

    Implemente IMediaAPIClient avec:
    - Listes tendances / populaires / mieux notes (films et series)
    - Recherche multi (films + series, personnes exclues)
    - Details complets avec credits
    - Saisons, episodes et identifiants externes
    - Cache avec fenetre de fraicheur (force_fresh pour recharger)
    - Rate limiting et retry par classe d'erreur

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base pour les images
        PLACEHOLDER_IMAGE: Image de remplacement quand aucun chemin n'existe
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
    PLACEHOLDER_IMAGE = "/placeholder.svg"

    def __init__(
        self,
        api_key: Optional[str],
        cache: TTLCache,
        fetcher: Fetcher,
        rate_controller: RateController,
        max_attempts: int = 3,
        language: str = "en-US",
        base_url: str = TMDB_BASE_URL,
        rate_limit_delay: float = RATE_LIMIT_DELAY,
        server_error_delay: float = SERVER_ERROR_DELAY,
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB v3 (parametre de requete api_key)
            cache: Cache des reponses
            fetcher: Fetcher partage
            rate_controller: Controleur d'espacement des appels TMDB
            max_attempts: Tentatives par appel (premiere incluse)
            language: Langue des metadonnees
            base_url: URL de base de l'API
            rate_limit_delay: Delai avant relance apres un 429
            server_error_delay: Delai avant relance apres un 500/503
        """
        self._api_key = api_key
        self._cache = cache
        self._fetcher = fetcher
        self._rate_controller = rate_controller
        self._max_attempts = max_attempts
        self._language = language
        self._base_url = base_url.rstrip("/")
        self._rate_limit_delay = rate_limit_delay
        self._server_error_delay = server_error_delay

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    @classmethod
    def image_url(cls, path: Optional[str], size: str = "w500") -> str:
        """
        Construit l'URL complete d'une image TMDB.

        Args:
            path: Chemin relatif (ex: "/abc.jpg"), None si absent
            size: Taille TMDB (w92, w185, w500, original...)

        Returns:
            URL de l'image, ou l'image de remplacement
        """
        if not path:
            return cls.PLACEHOLDER_IMAGE
        return f"{cls.TMDB_IMAGE_BASE_URL}/{size}{path}"

    async def _get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Appel GET espace par le rate controller puis relance si transitoire."""
        query: dict[str, Any] = {"language": self._language}
        if self._api_key:
            query["api_key"] = self._api_key
        if params:
            query.update(params)

        descriptor = RequestDescriptor(url=f"{self._base_url}{path}", params=query)
        await self._rate_controller.acquire()
        response = await request_with_retry(
            self._fetcher,
            descriptor,
            max_attempts=self._max_attempts,
            rate_limit_delay=self._rate_limit_delay,
            server_error_delay=self._server_error_delay,
        )
        return parse_json(response)

    async def _cached_json(
        self,
        cache_key: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        force_fresh: bool = False,
        not_found_as_none: bool = False,
    ) -> Any:
        async def load() -> Any:
            try:
                return await self._get_json(path, params)
            except HTTPError as e:
                if not_found_as_none and e.status == 404:
                    logger.info(f"TMDB: ressource introuvable {path}")
                    return None
                raise

        return await self._cache.get(cache_key, load, force_fresh=force_fresh)

    # ------------------------------------------------------------------
    # Conversion des payloads
    # ------------------------------------------------------------------

    @staticmethod
    def _summary(item: dict[str, Any], kind: MediaKind) -> MediaSummary:
        if kind is MediaKind.SERIES:
            title = item.get("name") or item.get("original_name", "")
            original = item.get("original_name")
            year = _parse_year(item.get("first_air_date"))
        else:
            title = item.get("title") or item.get("original_title", "")
            original = item.get("original_title")
            year = _parse_year(item.get("release_date"))

        return MediaSummary(
            id=int(item["id"]),
            kind=kind,
            title=title,
            original_title=original if original != title else None,
            year=year,
            overview=item.get("overview") or None,
            poster_path=item.get("poster_path"),
            backdrop_path=item.get("backdrop_path"),
            vote_average=item.get("vote_average"),
            genre_ids=tuple(item.get("genre_ids", ())),
        )

    def _page(self, data: dict[str, Any], kind: Optional[MediaKind]) -> MediaPage:
        results = []
        for item in data.get("results", []):
            if kind is None:
                media_type = item.get("media_type")
                if media_type not in ("movie", "tv"):
                    # Recherche multi: les personnes sont ignorees
                    continue
                item_kind = MediaKind.parse(media_type)
            else:
                item_kind = kind
            results.append(self._summary(item, item_kind))

        return MediaPage(
            page=data.get("page", 1),
            results=results,
            total_pages=data.get("total_pages", 1),
            total_results=data.get("total_results", len(results)),
        )

    @staticmethod
    def _credits(data: dict[str, Any], cast_limit: int = 10) -> Credits:
        cast = tuple(
            CastMember(
                id=member["id"],
                name=member.get("name", ""),
                character=member.get("character"),
                profile_path=member.get("profile_path"),
            )
            for member in data.get("cast", [])[:cast_limit]
            if member.get("name")
        )
        directors = tuple(
            crew.get("name", "")
            for crew in data.get("crew", [])
            if crew.get("job") == "Director"
        )
        return Credits(cast=cast, directors=directors)

    def _details(self, data: dict[str, Any], kind: MediaKind) -> MediaDetails:
        if kind is MediaKind.SERIES:
            run_times = data.get("episode_run_time") or []
            runtime = run_times[0] if run_times else None
            creators = tuple(c.get("name", "") for c in data.get("created_by", []))
        else:
            runtime = data.get("runtime")
            creators = ()

        credits = None
        if "credits" in data:
            credits = self._credits(data["credits"])
            if creators and not credits.directors:
                credits = Credits(cast=credits.cast, directors=creators)

        external_ids = data.get("external_ids") or {}
        summary = self._summary(data, kind)
        summary.genre_ids = tuple(g["id"] for g in data.get("genres", []) if "id" in g)

        return MediaDetails(
            summary=summary,
            genres=tuple(g.get("name", "") for g in data.get("genres", [])),
            runtime_minutes=runtime,
            status=data.get("status"),
            tagline=data.get("tagline") or None,
            number_of_seasons=data.get("number_of_seasons"),
            number_of_episodes=data.get("number_of_episodes"),
            vote_count=data.get("vote_count"),
            credits=credits,
            imdb_id=data.get("imdb_id") or external_ids.get("imdb_id"),
        )

    @staticmethod
    def _episode(data: dict[str, Any]) -> Episode:
        return Episode(
            id=data["id"],
            season_number=data.get("season_number", 0),
            episode_number=data.get("episode_number", 0),
            name=data.get("name", ""),
            overview=data.get("overview") or None,
            air_date=data.get("air_date"),
            still_path=data.get("still_path"),
            runtime_minutes=data.get("runtime"),
            vote_average=data.get("vote_average"),
        )

    # ------------------------------------------------------------------
    # Listes
    # ------------------------------------------------------------------

    async def _list(
        self, path: str, kind: MediaKind, page: int, force_fresh: bool
    ) -> MediaPage:
        data = await self._cached_json(
            f"tmdb:{path}:{self._language}:{page}",
            path,
            params={"page": page},
            force_fresh=force_fresh,
        )
        return self._page(data, kind)

    async def get_trending_movies(self, page: int = 1, force_fresh: bool = False) -> MediaPage:
        return await self._list("/trending/movie/day", MediaKind.MOVIE, page, force_fresh)

    async def get_popular_movies(self, page: int = 1, force_fresh: bool = False) -> MediaPage:
        return await self._list("/movie/popular", MediaKind.MOVIE, page, force_fresh)

    async def get_top_rated_movies(self, page: int = 1, force_fresh: bool = False) -> MediaPage:
        return await self._list("/movie/top_rated", MediaKind.MOVIE, page, force_fresh)

    async def get_trending_tv(self, page: int = 1, force_fresh: bool = False) -> MediaPage:
        return await self._list("/trending/tv/day", MediaKind.SERIES, page, force_fresh)

    async def get_popular_tv(self, page: int = 1, force_fresh: bool = False) -> MediaPage:
        return await self._list("/tv/popular", MediaKind.SERIES, page, force_fresh)

    async def get_top_rated_tv(self, page: int = 1, force_fresh: bool = False) -> MediaPage:
        return await self._list("/tv/top_rated", MediaKind.SERIES, page, force_fresh)

    async def search_multi(
        self, query: str, page: int = 1, force_fresh: bool = False
    ) -> MediaPage:
        """
        Recherche des films et series par titre.

        Les resultats de type personne sont ignores. Les resultats sont mis en
        cache comme les autres listes.
        """
        data = await self._cached_json(
            f"tmdb:search:{query}:{self._language}:{page}",
            "/search/multi",
            params={"query": query, "page": page, "include_adult": "false"},
            force_fresh=force_fresh,
        )
        return self._page(data, None)

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    async def _get_details(
        self, kind: MediaKind, media_id: int, force_fresh: bool
    ) -> Optional[MediaDetails]:
        segment = _path_segment(kind)
        data = await self._cached_json(
            f"tmdb:{segment}:{media_id}:{self._language}",
            f"/{segment}/{media_id}",
            params={"append_to_response": "credits,external_ids"},
            force_fresh=force_fresh,
            not_found_as_none=True,
        )
        if data is None:
            return None
        return self._details(data, kind)

    async def get_movie_details(
        self, movie_id: int, force_fresh: bool = False
    ) -> Optional[MediaDetails]:
        """
        Recupere les details complets d'un film (credits inclus).

        Args:
            movie_id: ID TMDB du film
            force_fresh: Ignore le cache et recharge depuis l'API

        Returns:
            MediaDetails, ou None si le film n'existe pas (404)
        """
        return await self._get_details(MediaKind.MOVIE, movie_id, force_fresh)

    async def get_tv_details(
        self, tv_id: int, force_fresh: bool = False
    ) -> Optional[MediaDetails]:
        """Recupere les details complets d'une serie (createurs en realisateurs)."""
        return await self._get_details(MediaKind.SERIES, tv_id, force_fresh)

    async def get_credits(
        self, kind: MediaKind, media_id: int, force_fresh: bool = False
    ) -> Credits:
        segment = _path_segment(kind)
        data = await self._cached_json(
            f"tmdb:{segment}:{media_id}:credits",
            f"/{segment}/{media_id}/credits",
            force_fresh=force_fresh,
        )
        return self._credits(data)

    async def get_season_details(
        self, tv_id: int, season_number: int, force_fresh: bool = False
    ) -> Optional[Season]:
        data = await self._cached_json(
            f"tmdb:tv:{tv_id}:season:{season_number}:{self._language}",
            f"/tv/{tv_id}/season/{season_number}",
            force_fresh=force_fresh,
            not_found_as_none=True,
        )
        if data is None:
            return None
        return Season(
            id=data["id"],
            season_number=data.get("season_number", season_number),
            name=data.get("name", ""),
            overview=data.get("overview") or None,
            air_date=data.get("air_date"),
            poster_path=data.get("poster_path"),
            episodes=tuple(self._episode(e) for e in data.get("episodes", [])),
        )

    async def get_episode_details(
        self,
        tv_id: int,
        season_number: int,
        episode_number: int,
        force_fresh: bool = False,
    ) -> Optional[Episode]:
        data = await self._cached_json(
            f"tmdb:tv:{tv_id}:season:{season_number}:episode:{episode_number}:{self._language}",
            f"/tv/{tv_id}/season/{season_number}/episode/{episode_number}",
            force_fresh=force_fresh,
            not_found_as_none=True,
        )
        return self._episode(data) if data is not None else None

    async def get_external_ids(
        self, kind: MediaKind, media_id: int, force_fresh: bool = False
    ) -> Optional[str]:
        """
        Recupere l'identifiant IMDB d'un film ou d'une serie.

        Returns:
            ID IMDB (ex: "tt0137523"), ou None si absent ou introuvable
        """
        segment = _path_segment(kind)
        data = await self._cached_json(
            f"tmdb:{segment}:{media_id}:external_ids",
            f"/{segment}/{media_id}/external_ids",
            force_fresh=force_fresh,
            not_found_as_none=True,
        )
        if not data:
            return None
        return data.get("imdb_id") or None
