"""
Objet valeur decrivant une requete vers une source externe.

Un RequestDescriptor est immutable: chaque appel reseau en construit un
nouveau. Les miroirs eventuels sont tentes dans l'ordre apres l'URL principale.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Description immutable d'un appel HTTP.

    Attributs:
        url: URL cible principale
        timeout: Timeout en secondes (None = timeout par defaut du Fetcher)
        mirrors: URLs equivalentes tentees dans l'ordre en cas d'echec
        method: Methode HTTP
        params: Parametres de query string
        headers: En-tetes supplementaires
        json: Corps JSON (requetes POST)
    """

    url: str
    timeout: Optional[float] = None
    mirrors: tuple[str, ...] = ()
    method: str = "GET"
    params: Optional[dict[str, Any]] = field(default=None, hash=False)
    headers: Optional[dict[str, str]] = field(default=None, hash=False)
    json: Optional[Any] = field(default=None, hash=False)

    @property
    def candidate_urls(self) -> tuple[str, ...]:
        """URL principale suivie des miroirs, dans l'ordre de tentative."""
        return (self.url, *self.mirrors)

    def with_url(self, url: str) -> "RequestDescriptor":
        """Retourne une copie ciblant une autre URL, sans miroirs."""
        return replace(self, url=url, mirrors=())
