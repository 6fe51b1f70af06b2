"""Entites du domaine: catalogue federe, chaines en direct, metadonnees."""

from cinestream.core.entities.channel import Channel, Stream, StreamResolution
from cinestream.core.entities.content import (
    AggregatedContentItem,
    ContentSearchResult,
    ContentSource,
    MediaKind,
    Plugin,
    Repository,
    RepositoryParseResult,
    SearchPage,
)
from cinestream.core.entities.media import (
    CastMember,
    Credits,
    Episode,
    MediaDetails,
    MediaPage,
    MediaSummary,
    Season,
)

__all__ = [
    "AggregatedContentItem",
    "CastMember",
    "Channel",
    "ContentSearchResult",
    "ContentSource",
    "Credits",
    "Episode",
    "MediaDetails",
    "MediaKind",
    "MediaPage",
    "MediaSummary",
    "Plugin",
    "Repository",
    "RepositoryParseResult",
    "Season",
    "SearchPage",
    "Stream",
    "StreamResolution",
]
