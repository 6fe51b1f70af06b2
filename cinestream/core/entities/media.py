"""
Media metadata entities.

Entities representing movies and TV shows as returned by the
metadata provider (TMDB).
"""

from dataclasses import dataclass
from typing import Optional

from cinestream.core.entities.content import MediaKind


@dataclass
class MediaSummary:
    """
    Movie or TV show as listed in trending/popular/search pages.

    Attributes:
        id: TMDB ID
        kind: MOVIE or SERIES
        title: Localized title (``title`` for movies, ``name`` for TV)
        original_title: Original language title
        year: Release or first air year
        overview: Plot summary
        poster_path: Path to poster image on TMDB CDN
        backdrop_path: Path to backdrop image on TMDB CDN
        vote_average: Average rating (0-10)
        genre_ids: TMDB genre ids
    """

    id: int
    kind: MediaKind
    title: str
    original_title: Optional[str] = None
    year: Optional[int] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    genre_ids: tuple[int, ...] = ()


@dataclass
class MediaPage:
    """One page of a TMDB list endpoint."""

    page: int
    results: list[MediaSummary]
    total_pages: int = 1
    total_results: int = 0

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages


@dataclass
class CastMember:
    """Actor credited on a movie or show."""

    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None


@dataclass
class Credits:
    """Cast and crew summary."""

    cast: tuple[CastMember, ...] = ()
    directors: tuple[str, ...] = ()


@dataclass
class MediaDetails:
    """
    Full movie or TV show details.

    Attributes:
        summary: Listing fields (id, title, year, ...)
        genres: Genre names
        runtime_minutes: Runtime (movies) or typical episode runtime (TV)
        status: Release status ("Released", "Ended", ...)
        tagline: Marketing tagline
        number_of_seasons: Season count (TV only)
        number_of_episodes: Episode count (TV only)
        vote_count: Number of votes
        credits: Cast and directors when requested
        imdb_id: IMDB identifier when present in the payload
    """

    summary: MediaSummary
    genres: tuple[str, ...] = ()
    runtime_minutes: Optional[int] = None
    status: Optional[str] = None
    tagline: Optional[str] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    vote_count: Optional[int] = None
    credits: Optional[Credits] = None
    imdb_id: Optional[str] = None

    @property
    def id(self) -> int:
        return self.summary.id

    @property
    def title(self) -> str:
        return self.summary.title


@dataclass
class Episode:
    """Episode of a TV show season."""

    id: int
    season_number: int
    episode_number: int
    name: str = ""
    overview: Optional[str] = None
    air_date: Optional[str] = None
    still_path: Optional[str] = None
    runtime_minutes: Optional[int] = None
    vote_average: Optional[float] = None


@dataclass
class Season:
    """Season of a TV show with its episodes."""

    id: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    air_date: Optional[str] = None
    poster_path: Optional[str] = None
    episodes: tuple[Episode, ...] = ()
