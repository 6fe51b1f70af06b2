"""
Tests unitaires pour la taxonomie d'erreurs et les messages utilisateur.

Ces tests verifient:
- La hierarchie des exceptions (tout derive de FetchError)
- RateLimitError conserve le statut 429 et le header Retry-After
- user_message traduit chaque classe d'erreur en message lisible
"""

import pytest

from cinestream.adapters.api.errors import (
    AggregateFailure,
    FetchError,
    HTTPError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    user_message,
)


class TestErrorHierarchy:
    """Tests pour la hierarchie des exceptions."""

    @pytest.mark.parametrize(
        "error",
        [
            NetworkError("down"),
            HTTPError(404),
            RateLimitError(),
            RequestTimeoutError("slow"),
            AggregateFailure("none"),
        ],
    )
    def test_all_errors_are_fetch_errors(self, error: FetchError) -> None:
        """Chaque erreur de la couche derive de FetchError."""
        assert isinstance(error, FetchError)

    def test_rate_limit_error_is_http_429(self) -> None:
        """RateLimitError porte le statut 429."""
        error = RateLimitError(retry_after=60)
        assert isinstance(error, HTTPError)
        assert error.status == 429
        assert error.retry_after == 60
        assert "60" in str(error)

    def test_rate_limit_error_without_retry_after(self) -> None:
        """RateLimitError fonctionne sans Retry-After."""
        error = RateLimitError(retry_after=None)
        assert error.retry_after is None

    def test_http_error_default_message(self) -> None:
        """HTTPError sans message affiche le statut."""
        error = HTTPError(503, url="https://example.com")
        assert str(error) == "HTTP 503"
        assert error.url == "https://example.com"

    def test_timeout_is_builtin_timeout(self) -> None:
        """RequestTimeoutError est aussi un TimeoutError standard."""
        assert isinstance(RequestTimeoutError("slow"), TimeoutError)

    def test_aggregate_failure_copies_errors(self) -> None:
        """AggregateFailure conserve une copie des erreurs par source."""
        errors = {"a": HTTPError(500)}
        failure = AggregateFailure("all failed", errors=errors)
        errors.clear()
        assert list(failure.errors) == ["a"]
        assert failure.page is None


class TestUserMessage:
    """Tests pour user_message."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (HTTPError(401), "Authentication error"),
            (HTTPError(403), "permission"),
            (HTTPError(404), "Content not found"),
            (RateLimitError(), "Too many requests"),
            (HTTPError(500), "Server error"),
            (HTTPError(503), "Server error"),
            (RequestTimeoutError("slow"), "timed out"),
            (NetworkError("down"), "Network connection issue"),
            (AggregateFailure("none"), "No content source"),
            (RuntimeError("boom"), "unexpected error"),
        ],
    )
    def test_user_message(self, error: BaseException, expected: str) -> None:
        """Chaque classe d'erreur a son message."""
        assert expected in user_message(error)

    def test_other_client_error_keeps_server_message(self) -> None:
        """Un 400 affiche le message renvoye par le serveur."""
        assert user_message(HTTPError(400, "bad query")) == "bad query"
