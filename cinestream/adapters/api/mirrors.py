"""
Resolution multi-miroirs: premiere URL equivalente qui repond.

Les URLs sont tentees strictement dans l'ordre, chacune au plus une fois.
L'echec d'une URL intermediaire est trace puis ignore; l'echec de la derniere
est l'erreur definitive remontee a l'appelant.
"""

from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx
from loguru import logger

from cinestream.adapters.api.errors import FetchError
from cinestream.core.value_objects.request import RequestDescriptor


def parse_json(response: httpx.Response) -> Any:
    """Decode le corps JSON d'une reponse."""
    try:
        return response.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON payload: {e}", url=str(response.url)) from e


class MirrorResolver:
    """
    Tente une liste ordonnee d'URLs equivalentes jusqu'au premier succes.

    Example:
        resolver = MirrorResolver(fetcher.fetch)
        channels = await resolver.resolve([
            "https://iptv-org.github.io/api/channels.json",
            "https://raw.githubusercontent.com/iptv-org/api/gh-pages/channels.json",
        ])
    """

    def __init__(
        self,
        fetch: Callable[[RequestDescriptor], Awaitable[httpx.Response]],
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialise le resolveur.

        Args:
            fetch: Fonction executant une requete (Fetcher.fetch ou equivalent)
            timeout: Timeout par URL (None = timeout par defaut du fetch)
        """
        self._fetch = fetch
        self._timeout = timeout

    async def resolve(
        self,
        urls: Sequence[str],
        parse: Callable[[httpx.Response], Any] = parse_json,
    ) -> Any:
        """
        Retourne le resultat parse de la premiere URL qui reussit.

        Args:
            urls: URLs equivalentes, dans l'ordre de preference
            parse: Conversion de la reponse (un echec compte comme un echec d'URL)

        Returns:
            Resultat de parse() pour la premiere URL en succes

        Raises:
            ValueError: Si la liste est vide
            Exception: L'erreur de la derniere URL si toutes echouent
        """
        if not urls:
            raise ValueError("Au moins une URL est requise")
        descriptor = RequestDescriptor(
            url=urls[0], mirrors=tuple(urls[1:]), timeout=self._timeout
        )
        return await self.resolve_descriptor(descriptor, parse)

    async def resolve_descriptor(
        self,
        descriptor: RequestDescriptor,
        parse: Callable[[httpx.Response], Any] = parse_json,
    ) -> Any:
        """Comme resolve(), a partir de l'URL principale et des miroirs d'un descripteur."""
        candidates = descriptor.candidate_urls
        last_index = len(candidates) - 1
        for index, url in enumerate(candidates):
            try:
                response = await self._fetch(descriptor.with_url(url))
                return parse(response)
            except Exception as e:
                if index == last_index:
                    logger.error(f"Tous les miroirs ont echoue, dernier: {url} ({e})")
                    raise
                logger.warning(f"Miroir en echec: {url} ({e}), essai du suivant")
