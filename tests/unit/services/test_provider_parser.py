"""
Tests unitaires pour l'analyse des fichiers de plugins.

Ces tests verifient:
- L'extraction des champs d'un fichier Kotlin de plugin
- L'enrichissement d'une ContentSource (champs absents conserves)
- La decouverte des plugins d'un depot avec respx (plugin manquant ignore)
"""

import httpx
import pytest
import respx

from cinestream.adapters.api.errors import HTTPError
from cinestream.adapters.api.fetch import Fetcher
from cinestream.core.entities.content import ContentSource
from cinestream.services.provider_parser import (
    KNOWN_REPOSITORIES,
    PluginRepository,
    ProviderInfo,
    apply_provider_info,
    discover_providers,
    parse_provider_file,
)

PROVIDER_SOURCE = '''
package com.moviesdrive

class MoviesDrive : MainAPI() {
    override var mainUrl = "https://fallback.example.com"
    override val mainUrl = "https://moviesdrive.example.com"
    override var name = "MoviesDrive"
    override var lang = "hi"
    val iconUrl = "https://moviesdrive.example.com/icon.png"
}
'''

REPOSITORY = PluginRepository(
    name="TEST",
    raw_url="https://raw.example.com/org/repo/main",
    api_url="https://api.example.com/repos/org/repo/contents",
)


class TestParseProviderFile:
    """Tests pour parse_provider_file."""

    def test_extracts_all_fields(self) -> None:
        info = parse_provider_file(PROVIDER_SOURCE)

        assert info == ProviderInfo(
            name="MoviesDrive",
            language="hi",
            logo="https://moviesdrive.example.com/icon.png",
            main_url="https://moviesdrive.example.com",
        )

    def test_missing_fields_are_none(self) -> None:
        info = parse_provider_file('override var name = "Bare"')

        assert info.name == "Bare"
        assert info.language is None
        assert info.main_url is None


class TestApplyProviderInfo:
    """Tests pour apply_provider_info."""

    def test_enriches_source(self) -> None:
        source = ContentSource(id="MoviesDrive", name="MoviesDrive", base_url="https://x")

        enriched = apply_provider_info(source, parse_provider_file(PROVIDER_SOURCE))

        assert enriched.language == "hi"
        assert enriched.logo == "https://moviesdrive.example.com/icon.png"
        assert enriched.description == "Provider for https://moviesdrive.example.com"
        assert source.language is None

    def test_absent_fields_keep_original(self) -> None:
        source = ContentSource(id="a", name="A", base_url="https://x", language="en")

        assert apply_provider_info(source, ProviderInfo()) == source


class TestPluginRepository:
    """Tests pour PluginRepository."""

    def test_provider_file_url(self) -> None:
        url = REPOSITORY.provider_file_url("MoviesDrive")
        assert url == (
            "https://raw.example.com/org/repo/main/MoviesDrive/src/main/kotlin/"
            "com/moviesdrive/MoviesDrive.kt"
        )

    def test_known_repositories(self) -> None:
        assert set(KNOWN_REPOSITORIES) == {"CSX", "PHISHER", "KEKIK"}


class TestDiscoverProviders:
    """Tests pour discover_providers."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_discovers_directories(self) -> None:
        """Chaque repertoire visible est analyse, un plugin manquant est ignore."""
        respx.get(REPOSITORY.api_url).mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"name": "MoviesDrive", "type": "dir"},
                    {"name": "Missing", "type": "dir"},
                    {"name": ".github", "type": "dir"},
                    {"name": "README.md", "type": "file"},
                ],
            )
        )
        respx.get(REPOSITORY.provider_file_url("MoviesDrive")).mock(
            return_value=httpx.Response(200, text=PROVIDER_SOURCE)
        )
        respx.get(REPOSITORY.provider_file_url("Missing")).mock(
            return_value=httpx.Response(404)
        )
        fetcher = Fetcher()

        try:
            providers = await discover_providers(fetcher, REPOSITORY)
        finally:
            await fetcher.close()

        assert [p.name for p in providers] == ["MoviesDrive"]
        assert providers[0].repository == "TEST"
        assert providers[0].language == "hi"

    @pytest.mark.asyncio
    @respx.mock
    async def test_listing_failure_propagates(self) -> None:
        respx.get(REPOSITORY.api_url).mock(return_value=httpx.Response(403))
        fetcher = Fetcher()

        try:
            with pytest.raises(HTTPError):
                await discover_providers(fetcher, REPOSITORY)
        finally:
            await fetcher.close()
