"""
Mecanisme de retry avec delai par classe d'erreur pour les API externes.

Les erreurs transitoires sont relancees avec un delai fixe dependant de leur
classe:
- HTTPError 429 (rate limiting): delai long (2s par defaut)
- HTTPError 500/503: delai court (1s par defaut)
- RequestTimeoutError: relance immediate

Toute autre erreur, ou l'epuisement des tentatives, remonte l'erreur
d'origine sans la reenvelopper (le code HTTP est conserve).

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=3)
    async def my_api_call():
        ...

    # Avec la fonction helper
    response = await request_with_retry(fetcher, descriptor)
"""

from typing import Any, Awaitable, Callable, Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from cinestream.adapters.api.errors import HTTPError, RequestTimeoutError
from cinestream.core.value_objects.request import RequestDescriptor

RATE_LIMIT_DELAY = 2.0
SERVER_ERROR_DELAY = 1.0
SERVER_ERROR_STATUSES = frozenset({500, 503})


def is_transient(error: BaseException) -> bool:
    """
    Indique si une erreur justifie une nouvelle tentative.

    Args:
        error: Exception levee par l'operation

    Returns:
        True pour 429, 500, 503 et les timeouts locaux
    """
    if isinstance(error, RequestTimeoutError):
        return True
    if isinstance(error, HTTPError):
        return error.status == 429 or error.status in SERVER_ERROR_STATUSES
    return False


def backoff_delay(
    error: Optional[BaseException],
    rate_limit_delay: float = RATE_LIMIT_DELAY,
    server_error_delay: float = SERVER_ERROR_DELAY,
) -> float:
    """
    Retourne le delai a respecter avant de relancer apres cette erreur.

    Args:
        error: Exception de la tentative precedente
        rate_limit_delay: Delai apres un 429
        server_error_delay: Delai apres un 500/503

    Returns:
        Delai en secondes (0 pour un timeout)
    """
    if isinstance(error, HTTPError):
        if error.status == 429:
            return rate_limit_delay
        if error.status in SERVER_ERROR_STATUSES:
            return server_error_delay
    return 0.0


class wait_for_failure_class(wait_base):
    """Strategie d'attente tenacity basee sur la classe de l'erreur."""

    def __init__(self, rate_limit_delay: float, server_error_delay: float) -> None:
        self.rate_limit_delay = rate_limit_delay
        self.server_error_delay = server_error_delay

    def __call__(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        return backoff_delay(error, self.rate_limit_delay, self.server_error_delay)


def _log_retry(retry_state: RetryCallState) -> None:
    """Trace chaque nouvelle tentative."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Tentative {retry_state.attempt_number} echouee ({error}), "
        f"nouvel essai dans {delay:.1f}s"
    )


def with_retry(
    max_attempts: int = 3,
    rate_limit_delay: float = RATE_LIMIT_DELAY,
    server_error_delay: float = SERVER_ERROR_DELAY,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
):
    """
    Decorateur pour relancer une operation async sur erreur transitoire.

    Args:
        max_attempts: Nombre maximum de tentatives, premiere incluse (defaut: 3)
        rate_limit_delay: Delai avant relance apres un 429 (defaut: 2s)
        server_error_delay: Delai avant relance apres un 500/503 (defaut: 1s)
        sleep: Fonction d'attente async (injectable pour les tests)

    Returns:
        Decorateur a appliquer sur une fonction async

    Example:
        @with_retry(max_attempts=3)
        async def fetch_data():
            # Relance jusqu'a 2 fois sur 429/500/503/timeout
            ...
    """
    if max_attempts < 1:
        raise ValueError("max_attempts doit etre >= 1")

    options: dict[str, Any] = {}
    if sleep is not None:
        options["sleep"] = sleep

    return retry(
        retry=retry_if_exception(is_transient),
        wait=wait_for_failure_class(rate_limit_delay, server_error_delay),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
        **options,
    )


async def request_with_retry(
    fetcher: Any,
    descriptor: RequestDescriptor,
    max_attempts: int = 3,
    rate_limit_delay: float = RATE_LIMIT_DELAY,
    server_error_delay: float = SERVER_ERROR_DELAY,
) -> httpx.Response:
    """
    Execute une requete via le Fetcher avec retry automatique.

    Args:
        fetcher: Fetcher (ou objet exposant fetch(descriptor))
        descriptor: Description de la requete
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        rate_limit_delay: Delai avant relance apres un 429
        server_error_delay: Delai avant relance apres un 500/503

    Returns:
        httpx.Response en cas de succes

    Raises:
        HTTPError: Statut non transitoire, ou transitoire apres epuisement
        RequestTimeoutError: Timeout apres epuisement des tentatives
        NetworkError: Immediatement, sans retry

    Example:
        response = await request_with_retry(
            fetcher, RequestDescriptor(url="https://api.themoviedb.org/3/movie/550")
        )
    """

    @with_retry(
        max_attempts=max_attempts,
        rate_limit_delay=rate_limit_delay,
        server_error_delay=server_error_delay,
    )
    async def _do_request() -> httpx.Response:
        return await fetcher.fetch(descriptor)

    return await _do_request()
