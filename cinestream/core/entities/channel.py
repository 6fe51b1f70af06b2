"""
Chaines de television en direct et flux associes.

Les donnees proviennent de l'annuaire communautaire iptv-org: une liste de
chaines et une liste de flux, relies par l'identifiant de chaine.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Channel:
    """
    Chaine de l'annuaire.

    Attributes:
        id: Identifiant de la chaine (ex: "ZeeTV.in")
        name: Nom affiche
        country: Code pays ISO (ex: "IN")
        languages: Codes langue ISO 639-3 (ex: ("hin",))
        categories: Categories (news, movies, ...)
        broadcast_area: Zones de diffusion (ex: ("c/IN",))
        is_nsfw: Contenu adulte
        logo: URL du logo
        website: Site officiel
    """

    id: str
    name: str
    country: str = ""
    languages: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    broadcast_area: tuple[str, ...] = ()
    is_nsfw: bool = False
    logo: Optional[str] = None
    website: Optional[str] = None
    subdivision: Optional[str] = None
    city: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Channel":
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            country=payload.get("country") or "",
            languages=tuple(payload.get("languages") or ()),
            categories=tuple(payload.get("categories") or ()),
            broadcast_area=tuple(payload.get("broadcast_area") or ()),
            is_nsfw=bool(payload.get("is_nsfw", False)),
            logo=payload.get("logo"),
            website=payload.get("website"),
            subdivision=payload.get("subdivision"),
            city=payload.get("city"),
        )


@dataclass(frozen=True)
class Stream:
    """Flux lisible d'une chaine."""

    channel: Optional[str]
    url: str
    http_referrer: Optional[str] = None
    user_agent: Optional[str] = None
    status: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bitrate: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Stream":
        return cls(
            channel=payload.get("channel"),
            url=payload["url"],
            http_referrer=payload.get("http_referrer") or payload.get("referrer"),
            user_agent=payload.get("user_agent"),
            status=payload.get("status"),
            width=payload.get("width"),
            height=payload.get("height"),
            bitrate=payload.get("bitrate"),
        )


@dataclass(frozen=True)
class StreamResolution:
    """
    Flux resolu pour une chaine.

    Vit uniquement dans le cache de session: jamais persiste.
    """

    channel_id: str
    url: str
    stream: Optional[Stream] = None
