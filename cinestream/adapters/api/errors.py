"""
Taxonomie des erreurs de la couche d'acces aux sources externes.

Toutes les erreurs derivent de FetchError:
- NetworkError: aucune reponse recue (connexion, DNS, protocole)
- HTTPError: le serveur a repondu avec un statut hors 2xx
- RateLimitError: cas particulier de HTTPError pour le statut 429
- RequestTimeoutError: requete annulee localement apres le timeout
- AggregateFailure: recherche federee sans source exploitable
"""

from typing import Optional


class FetchError(Exception):
    """Erreur de base pour tout appel vers une source externe."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        self.url = url
        super().__init__(message)


class NetworkError(FetchError):
    """La requete n'a atteint aucun serveur (connexion refusee, DNS, etc.)."""


class HTTPError(FetchError):
    """
    Le serveur a repondu avec un statut d'erreur.

    Attributes:
        status: Code HTTP de la reponse
    """

    def __init__(
        self, status: int, message: Optional[str] = None, url: Optional[str] = None
    ) -> None:
        self.status = status
        super().__init__(message or f"HTTP {status}", url=url)


class RateLimitError(HTTPError):
    """
    Exception levee quand l'API retourne 429 Too Many Requests.

    Attributes:
        retry_after: Nombre de secondes a attendre (depuis le header Retry-After),
                     ou None si non specifie.
    """

    def __init__(
        self,
        retry_after: Optional[int] = None,
        message: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(
            429, message or f"Rate limited. Retry after: {retry_after}s", url=url
        )


class RequestTimeoutError(FetchError, TimeoutError):
    """La requete a ete annulee localement car le timeout a expire."""


class AggregateFailure(FetchError):
    """
    Echec global d'une recherche federee.

    Levee quand aucune source n'est exploitable ou quand toutes les sources
    interrogees ont echoue sans produire de resultat.

    Attributes:
        errors: Erreur rencontree par source (id de source -> exception)
        page: Page de resultats vide (has_more = False)
    """

    def __init__(self, message: str, errors: Optional[dict] = None, page=None) -> None:
        self.errors = dict(errors or {})
        self.page = page
        super().__init__(message)


def user_message(error: BaseException) -> str:
    """
    Traduit une erreur en message affichable a l'utilisateur.

    Args:
        error: Exception levee par la couche d'acces

    Returns:
        Message lisible pour proposer une nouvelle tentative
    """
    if isinstance(error, RateLimitError):
        return "Too many requests. Please wait a moment and try again."
    if isinstance(error, HTTPError):
        if error.status == 401:
            return "Authentication error. Please refresh the page and try again."
        if error.status == 403:
            return "You don't have permission to access this content."
        if error.status == 404:
            return "Content not found. It may have been removed or is unavailable."
        if error.status >= 500:
            return "Server error. Please try again later."
        return str(error)
    if isinstance(error, RequestTimeoutError):
        return "Request timed out. Please try again later."
    if isinstance(error, NetworkError):
        return "Network connection issue. Please check your internet and try again."
    if isinstance(error, AggregateFailure):
        return "No content source could be reached. Please try again later."
    return "An unexpected error occurred. Please try again later."
