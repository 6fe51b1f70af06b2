"""
Tests unitaires pour le Fetcher.

Ces tests verifient:
- Une reponse 2xx est retournee telle quelle
- Les statuts hors 2xx deviennent des HTTPError avec le message du serveur
- 429 devient RateLimitError avec Retry-After
- Timeout et erreurs de transport sont classes separement
- Le timeout du descripteur prime sur le timeout par defaut
"""

import json

import httpx
import pytest
import pytest_asyncio
import respx

from cinestream.adapters.api.errors import (
    FetchError,
    HTTPError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)
from cinestream.adapters.api.fetch import Fetcher, raise_for_status
from cinestream.core.value_objects.request import RequestDescriptor

URL = "https://api.example.com/items"


@pytest_asyncio.fixture
async def fetcher():
    """Fetcher ferme a la fin du test."""
    instance = Fetcher(default_timeout=5.0)
    yield instance
    await instance.close()


class TestFetch:
    """Tests pour Fetcher.fetch()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_returns_response(self, fetcher: Fetcher) -> None:
        """Un 200 est retourne sans transformation."""
        respx.get(URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        response = await fetcher.fetch(RequestDescriptor(url=URL))

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_params_headers_and_body(self, fetcher: Fetcher) -> None:
        """Methode, parametres, en-tetes et corps JSON sont transmis."""
        route = respx.post(URL).mock(return_value=httpx.Response(200, json={}))

        await fetcher.fetch(
            RequestDescriptor(
                url=URL,
                method="POST",
                params={"page": 2},
                headers={"X-Test": "1"},
                json={"action": "getSources"},
            )
        )

        request = route.calls.last.request
        assert request.url.params["page"] == "2"
        assert request.headers["X-Test"] == "1"
        assert json.loads(request.content) == {"action": "getSources"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_404_raises_http_error_with_status(self, fetcher: Fetcher) -> None:
        """Un 404 leve HTTPError en conservant le statut."""
        respx.get(URL).mock(
            return_value=httpx.Response(404, json={"status_message": "Not here"})
        )

        with pytest.raises(HTTPError) as exc_info:
            await fetcher.fetch(RequestDescriptor(url=URL))

        assert exc_info.value.status == 404
        assert str(exc_info.value) == "Not here"
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_field_used_as_message(self, fetcher: Fetcher) -> None:
        """Le champ error du corps sert de message."""
        respx.get(URL).mock(return_value=httpx.Response(400, json={"error": "bad action"}))

        with pytest.raises(HTTPError, match="bad action"):
            await fetcher.fetch(RequestDescriptor(url=URL))

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_error_body(self, fetcher: Fetcher) -> None:
        """Sans corps JSON, le message reprend statut et raison."""
        respx.get(URL).mock(return_value=httpx.Response(500, text="<html>oops</html>"))

        with pytest.raises(HTTPError) as exc_info:
            await fetcher.fetch(RequestDescriptor(url=URL))

        assert exc_info.value.status == 500
        assert "500" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_429_raises_rate_limit_error(self, fetcher: Fetcher) -> None:
        """Un 429 leve RateLimitError avec Retry-After."""
        respx.get(URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "30"})
        )

        with pytest.raises(RateLimitError) as exc_info:
            await fetcher.fetch(RequestDescriptor(url=URL))

        assert exc_info.value.status == 429
        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_raises_request_timeout_error(self, fetcher: Fetcher) -> None:
        """Un timeout httpx devient RequestTimeoutError."""
        respx.get(URL).mock(side_effect=httpx.ReadTimeout("too slow"))

        with pytest.raises(RequestTimeoutError, match="1.5s"):
            await fetcher.fetch(RequestDescriptor(url=URL, timeout=1.5))

    @pytest.mark.asyncio
    @respx.mock
    async def test_connect_error_raises_network_error(self, fetcher: Fetcher) -> None:
        """Une connexion refusee devient NetworkError."""
        respx.get(URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError):
            await fetcher.fetch(RequestDescriptor(url=URL))


class TestFetchJson:
    """Tests pour Fetcher.fetch_json()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_decodes_json(self, fetcher: Fetcher) -> None:
        """Le corps JSON est decode."""
        respx.get(URL).mock(return_value=httpx.Response(200, json=[1, 2]))

        assert await fetcher.fetch_json(RequestDescriptor(url=URL)) == [1, 2]

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_raises_fetch_error(self, fetcher: Fetcher) -> None:
        """Un corps non JSON leve FetchError."""
        respx.get(URL).mock(return_value=httpx.Response(200, text="not json"))

        with pytest.raises(FetchError):
            await fetcher.fetch_json(RequestDescriptor(url=URL))


class TestRaiseForStatus:
    """Tests pour raise_for_status."""

    def test_success_does_not_raise(self) -> None:
        """Un 2xx ne leve rien."""
        raise_for_status(httpx.Response(204))

    def test_response_without_request(self) -> None:
        """Une reponse sans requete associee leve quand meme HTTPError."""
        with pytest.raises(HTTPError) as exc_info:
            raise_for_status(httpx.Response(403))
        assert exc_info.value.url is None
