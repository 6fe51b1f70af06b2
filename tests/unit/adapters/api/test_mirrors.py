"""
Tests unitaires pour le MirrorResolver.

Ces tests verifient:
- Le premier miroir en succes est retenu, les suivants ne sont pas tentes
- Un echec intermediaire (HTTP, reseau, parsing) passe au miroir suivant
- L'erreur du dernier miroir remonte quand tous echouent
- Chaque URL est tentee au plus une fois, dans l'ordre
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from cinestream.adapters.api.errors import FetchError, HTTPError, NetworkError
from cinestream.adapters.api.mirrors import MirrorResolver, parse_json
from cinestream.core.value_objects.request import RequestDescriptor

PRIMARY = "https://primary.example.com/channels.json"
FALLBACK = "https://fallback.example.com/channels.json"
LAST = "https://last.example.com/channels.json"


def _json_response(url: str, payload) -> httpx.Response:
    return httpx.Response(200, json=payload, request=httpx.Request("GET", url))


def _requested_urls(fetch: AsyncMock) -> list[str]:
    return [awaited.args[0].url for awaited in fetch.await_args_list]


class TestMirrorResolver:
    """Tests pour MirrorResolver.resolve()."""

    @pytest.mark.asyncio
    async def test_primary_success_skips_mirrors(self) -> None:
        """Le miroir principal repond: aucun autre n'est contacte."""
        fetch = AsyncMock(return_value=_json_response(PRIMARY, [1]))
        resolver = MirrorResolver(fetch)

        result = await resolver.resolve([PRIMARY, FALLBACK])

        assert result == [1]
        assert _requested_urls(fetch) == [PRIMARY]

    @pytest.mark.asyncio
    async def test_falls_back_after_http_error(self) -> None:
        """Un 503 sur le principal bascule sur le secours."""
        fetch = AsyncMock(side_effect=[HTTPError(503), _json_response(FALLBACK, [2])])
        resolver = MirrorResolver(fetch)

        result = await resolver.resolve([PRIMARY, FALLBACK])

        assert result == [2]
        assert _requested_urls(fetch) == [PRIMARY, FALLBACK]

    @pytest.mark.asyncio
    async def test_parse_failure_counts_as_mirror_failure(self) -> None:
        """Un corps invalide sur le principal passe au miroir suivant."""
        broken = httpx.Response(200, text="<html>", request=httpx.Request("GET", PRIMARY))
        fetch = AsyncMock(side_effect=[broken, _json_response(FALLBACK, {"ok": True})])
        resolver = MirrorResolver(fetch)

        assert await resolver.resolve([PRIMARY, FALLBACK]) == {"ok": True}

    @pytest.mark.asyncio
    async def test_all_fail_raises_last_error(self) -> None:
        """Quand tous echouent, l'erreur du dernier miroir remonte."""
        last_error = NetworkError("unreachable")
        fetch = AsyncMock(side_effect=[HTTPError(500), HTTPError(404), last_error])
        resolver = MirrorResolver(fetch)

        with pytest.raises(NetworkError) as exc_info:
            await resolver.resolve([PRIMARY, FALLBACK, LAST])

        assert exc_info.value is last_error
        assert _requested_urls(fetch) == [PRIMARY, FALLBACK, LAST]

    @pytest.mark.asyncio
    async def test_single_url(self) -> None:
        """Une seule URL: son erreur remonte directement."""
        fetch = AsyncMock(side_effect=HTTPError(404))
        resolver = MirrorResolver(fetch)

        with pytest.raises(HTTPError):
            await resolver.resolve([PRIMARY])
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_list_rejected(self) -> None:
        """Une liste vide est une erreur d'appel."""
        resolver = MirrorResolver(AsyncMock())

        with pytest.raises(ValueError):
            await resolver.resolve([])

    @pytest.mark.asyncio
    async def test_timeout_applied_per_url(self) -> None:
        """Le timeout du resolveur est porte par chaque requete."""
        fetch = AsyncMock(side_effect=[HTTPError(503), _json_response(FALLBACK, [])])
        resolver = MirrorResolver(fetch, timeout=3.0)

        await resolver.resolve([PRIMARY, FALLBACK])

        assert all(a.args[0].timeout == 3.0 for a in fetch.await_args_list)

    @pytest.mark.asyncio
    async def test_resolve_descriptor_uses_mirrors(self) -> None:
        """resolve_descriptor tente l'URL principale puis les miroirs."""
        fetch = AsyncMock(side_effect=[HTTPError(500), _json_response(FALLBACK, [])])
        resolver = MirrorResolver(fetch)
        descriptor = RequestDescriptor(url=PRIMARY, mirrors=(FALLBACK,))

        await resolver.resolve_descriptor(descriptor)

        assert _requested_urls(fetch) == [PRIMARY, FALLBACK]
        assert all(a.args[0].mirrors == () for a in fetch.await_args_list)


class TestParseJson:
    """Tests pour parse_json."""

    def test_invalid_body_raises_fetch_error(self) -> None:
        """Un corps non JSON leve FetchError."""
        response = httpx.Response(200, text="nope", request=httpx.Request("GET", PRIMARY))
        with pytest.raises(FetchError):
            parse_json(response)
