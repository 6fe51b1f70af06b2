"""
Noyau d'acces reseau: une requete, un timeout, une erreur typee.

Le Fetcher ne met rien en cache et ne relance jamais: il execute exactement
une requete et convertit les echecs httpx dans la taxonomie de errors.py.
Un appelant n'a jamais a inspecter le statut de la reponse.

Usage:
    fetcher = Fetcher(default_timeout=10.0)
    response = await fetcher.fetch(RequestDescriptor(url="https://..."))
    data = await fetcher.fetch_json(RequestDescriptor(url="https://..."))
    await fetcher.close()
"""

from typing import Any, Callable, Iterable, Optional, TypeVar

import httpx
from loguru import logger

from cinestream.adapters.api.errors import (
    FetchError,
    HTTPError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)
from cinestream.core.value_objects.request import RequestDescriptor

T = TypeVar("T")

# Erreurs levees par les constructeurs d'entites sur une ligne mal formee
MALFORMED_ROW_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def _error_message(response: httpx.Response) -> str:
    """Extrait un message d'erreur lisible du corps de la reponse."""
    default = f"API error: {response.status_code} {response.reason_phrase}".strip()
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict):
        for field_name in ("status_message", "error", "message"):
            value = payload.get(field_name)
            if isinstance(value, str) and value:
                return value
    return default


def raise_for_status(response: httpx.Response) -> None:
    """
    Convertit une reponse hors 2xx en HTTPError (RateLimitError pour 429).

    Args:
        response: Reponse httpx recue

    Raises:
        RateLimitError: Si le statut est 429
        HTTPError: Pour tout autre statut hors 2xx
    """
    if response.is_success:
        return

    try:
        url: Optional[str] = str(response.request.url)
    except RuntimeError:
        # Reponse construite sans requete associee
        url = None
    message = _error_message(response)
    if response.status_code == 429:
        retry_after_header = response.headers.get("Retry-After")
        retry_after = int(retry_after_header) if retry_after_header and retry_after_header.isdigit() else None
        raise RateLimitError(retry_after, message=message, url=url)
    raise HTTPError(response.status_code, message, url=url)


def parse_rows(rows: Iterable[Any], build: Callable[[Any], T], label: str) -> list[T]:
    """
    Construit les entites d'une liste en ignorant les lignes mal formees.

    Args:
        rows: Lignes brutes (dictionnaires JSON)
        build: Constructeur d'entite pour une ligne
        label: Nature des lignes, pour le log

    Returns:
        Entites construites, dans l'ordre des lignes
    """
    parsed: list[T] = []
    skipped = 0
    for row in rows:
        try:
            parsed.append(build(row))
        except MALFORMED_ROW_ERRORS as e:
            skipped += 1
            logger.debug(f"{label}: ligne ignoree ({type(e).__name__}: {e})")
    if skipped:
        logger.warning(f"{label}: {skipped} ligne(s) mal formee(s) ignoree(s)")
    return parsed


def parse_one(payload: Any, build: Callable[[Any], T], label: str) -> T:
    """Construit une entite unique; une reponse mal formee devient FetchError."""
    try:
        return build(payload)
    except MALFORMED_ROW_ERRORS as e:
        raise FetchError(f"{label}: reponse mal formee ({type(e).__name__}: {e})") from e


class Fetcher:
    """
    Execute une requete HTTP unique avec timeout et classification d'erreur.

    Attributes:
        DEFAULT_TIMEOUT: Timeout par defaut en secondes
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        default_timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialise le fetcher.

        Args:
            default_timeout: Timeout applique quand le descripteur n'en fixe pas
            client: Client httpx a reutiliser (cree a la demande sinon)
        """
        self._default_timeout = default_timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                follow_redirects=True,
            )
        return self._client

    async def fetch(self, descriptor: RequestDescriptor) -> httpx.Response:
        """
        Execute la requete decrite par le descripteur.

        Args:
            descriptor: Description de la requete (URL, timeout, corps...)

        Returns:
            Reponse httpx avec un statut 2xx

        Raises:
            RequestTimeoutError: Si le timeout a expire
            NetworkError: Si aucune reponse n'a ete recue
            HTTPError: Si le serveur a repondu hors 2xx
        """
        timeout = descriptor.timeout if descriptor.timeout is not None else self._default_timeout
        client = self._get_client()
        logger.debug(f"{descriptor.method} {descriptor.url}")

        try:
            response = await client.request(
                descriptor.method,
                descriptor.url,
                params=descriptor.params,
                headers=descriptor.headers,
                json=descriptor.json,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"Request timed out after {timeout}s", url=descriptor.url
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"Network error or CORS issue: {e}", url=descriptor.url
            ) from e

        raise_for_status(response)
        return response

    async def fetch_json(self, descriptor: RequestDescriptor) -> Any:
        """
        Execute la requete et decode le corps JSON.

        Raises:
            FetchError: Si le corps n'est pas du JSON valide
        """
        response = await self.fetch(descriptor)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON payload: {e}", url=descriptor.url) from e

    async def close(self) -> None:
        """Ferme le client HTTP (a appeler a la fin)."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
