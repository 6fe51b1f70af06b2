"""
Analyse des fichiers sources de plugins publies dans un depot.

Chaque plugin est un fichier source Kotlin qui declare son nom, sa langue,
son icone et son URL principale sous forme d'affectations. On en extrait
ces champs pour enrichir la fiche ContentSource correspondante.

Usage:
    info = parse_provider_file(content)
    source = apply_provider_info(source, info)

    providers = await discover_providers(fetcher, KNOWN_REPOSITORIES["CSX"])
"""

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from cinestream.adapters.api.errors import FetchError
from cinestream.adapters.api.fetch import Fetcher
from cinestream.core.entities.content import ContentSource
from cinestream.core.value_objects.request import RequestDescriptor

NAME_PATTERN = re.compile(r'name\s*=\s*"([^"]+)"')
LANG_PATTERN = re.compile(r'lang\s*=\s*"([^"]+)"')
ICON_PATTERN = re.compile(r'iconUrl\s*=\s*"([^"]+)"')
MAIN_URL_PATTERN = re.compile(r'override\s+val\s+mainUrl\s*=\s*"([^"]+)"')


@dataclass(frozen=True)
class ProviderInfo:
    """Champs extraits d'un fichier de plugin (None si absents)."""

    name: Optional[str] = None
    language: Optional[str] = None
    logo: Optional[str] = None
    main_url: Optional[str] = None


@dataclass(frozen=True)
class PluginRepository:
    """
    Depot de plugins heberge sur GitHub.

    Attributes:
        name: Identifiant court du depot
        raw_url: Base des fichiers bruts (raw.githubusercontent.com)
        api_url: Endpoint "contents" de l'API GitHub
    """

    name: str
    raw_url: str
    api_url: str

    def provider_file_url(self, directory: str) -> str:
        """URL conventionnelle du fichier principal d'un plugin."""
        return (
            f"{self.raw_url}/{directory}/src/main/kotlin/com/"
            f"{directory.lower()}/{directory}.kt"
        )


KNOWN_REPOSITORIES = {
    "CSX": PluginRepository(
        name="CSX",
        raw_url="https://raw.githubusercontent.com/SaurabhKaperwan/CSX/master",
        api_url="https://api.github.com/repos/SaurabhKaperwan/CSX/contents",
    ),
    "PHISHER": PluginRepository(
        name="PHISHER",
        raw_url="https://raw.githubusercontent.com/phisher98/cloudstream-extensions-phisher/main",
        api_url="https://api.github.com/repos/phisher98/cloudstream-extensions-phisher/contents",
    ),
    "KEKIK": PluginRepository(
        name="KEKIK",
        raw_url="https://raw.githubusercontent.com/keyiflerolsun/Kekik-cloudstream/main",
        api_url="https://api.github.com/repos/keyiflerolsun/Kekik-cloudstream/contents",
    ),
}


def _first(pattern: re.Pattern, content: str) -> Optional[str]:
    match = pattern.search(content)
    return match.group(1) if match else None


def parse_provider_file(content: str) -> ProviderInfo:
    """Extrait nom, langue, icone et URL principale d'un fichier de plugin."""
    return ProviderInfo(
        name=_first(NAME_PATTERN, content),
        language=_first(LANG_PATTERN, content),
        logo=_first(ICON_PATTERN, content),
        main_url=_first(MAIN_URL_PATTERN, content),
    )


def apply_provider_info(source: ContentSource, info: ProviderInfo) -> ContentSource:
    """
    Retourne une copie de la source enrichie des champs extraits.

    Les champs absents du fichier conservent leur valeur d'origine.
    """
    changes: dict[str, Any] = {}
    if info.name:
        changes["name"] = info.name
    if info.language:
        changes["language"] = info.language
    if info.logo:
        changes["logo"] = info.logo
    if info.main_url:
        changes["description"] = f"Provider for {info.main_url}"
    return dataclasses.replace(source, **changes)


async def discover_providers(fetcher: Fetcher, repository: PluginRepository) -> list[ContentSource]:
    """
    Decouvre les plugins d'un depot via l'API GitHub.

    Chaque repertoire visible du depot est considere comme un plugin
    potentiel; un plugin dont le fichier est introuvable ou illisible est
    ignore avec un avertissement.

    Args:
        fetcher: Fetcher partage
        repository: Depot a explorer

    Returns:
        Sources decouvertes, dans l'ordre des repertoires

    Raises:
        FetchError: Si le listing du depot lui-meme echoue
    """
    listing = await fetcher.fetch_json(RequestDescriptor(url=repository.api_url))
    directories = [
        item["name"]
        for item in listing
        if item.get("type") == "dir" and not item.get("name", ".").startswith(".")
    ]

    providers: list[ContentSource] = []
    for directory in directories:
        file_url = repository.provider_file_url(directory)
        try:
            response = await fetcher.fetch(RequestDescriptor(url=file_url))
        except FetchError as e:
            logger.warning(f"Plugin {directory} ignore ({repository.name}): {e}")
            continue

        source = ContentSource(
            id=directory,
            name=directory,
            base_url=file_url,
            repository=repository.name,
        )
        providers.append(apply_provider_info(source, parse_provider_file(response.text)))

    logger.info(f"Depot {repository.name}: {len(providers)} plugin(s) decouvert(s)")
    return providers
