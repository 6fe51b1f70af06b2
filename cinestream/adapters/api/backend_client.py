"""
Client du backend gere exposant le catalogue federe.

Toutes les operations passent par un point d'entree RPC unique (fonction
`cloudstream-utils`) qui recoit une action typee (voir backend_actions.py).
Les actions de lecture sont relancees sur erreur transitoire; les actions
qui modifient l'etat ne le sont jamais.

Usage:
    backend = FederatedBackendClient(
        base_url="https://xyz.supabase.co", api_key="anon_key", fetcher=Fetcher()
    )
    sources = await backend.get_sources()
    result = await backend.search_content("dune", sources=["source-1"])
"""

from typing import Any, Optional, Sequence

from loguru import logger

from cinestream.adapters.api.backend_actions import (
    MUTATING_ACTIONS,
    AddPlugin,
    AddRepository,
    BackendEnvelope,
    GetContentDetails,
    GetPlugins,
    GetRepositories,
    GetSources,
    MutationResponse,
    ParseRepository,
    ParseRepositoryResponse,
    PluginPayload,
    RepositoryPayload,
    SearchContent,
    SearchContentResponse,
    SearchOptions,
    SyncContent,
    SyncSources,
    to_payload,
)
from cinestream.adapters.api.errors import FetchError
from cinestream.adapters.api.fetch import Fetcher, parse_one, parse_rows
from cinestream.adapters.api.mirrors import parse_json
from cinestream.adapters.api.retry import (
    RATE_LIMIT_DELAY,
    SERVER_ERROR_DELAY,
    request_with_retry,
)
from cinestream.core.entities.content import (
    AggregatedContentItem,
    ContentSearchResult,
    ContentSource,
    Plugin,
    Repository,
    RepositoryParseResult,
)
from cinestream.core.ports.api_clients import IFederatedBackend
from cinestream.core.value_objects.request import RequestDescriptor


class FederatedBackendClient(IFederatedBackend):
    """
    Client RPC du backend federe.

    Attributes:
        FUNCTION_PATH: Chemin de la fonction RPC principale
        SYNC_FUNCTION_PATH: Chemin de la fonction de synchronisation des sources
    """

    FUNCTION_PATH = "/functions/v1/cloudstream-utils"
    SYNC_FUNCTION_PATH = "/functions/v1/sync-cloudstream"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        fetcher: Fetcher,
        max_attempts: int = 3,
        timeout: Optional[float] = None,
        rate_limit_delay: float = RATE_LIMIT_DELAY,
        server_error_delay: float = SERVER_ERROR_DELAY,
    ) -> None:
        """
        Initialise le client.

        Args:
            base_url: URL du projet backend
            api_key: Cle d'acces (envoyee en Bearer et en en-tete apikey)
            fetcher: Fetcher partage
            max_attempts: Tentatives pour les actions de lecture
            timeout: Timeout par appel (None = defaut du fetcher)
            rate_limit_delay: Delai avant relance apres un 429
            server_error_delay: Delai avant relance apres un 500/503
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._fetcher = fetcher
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._rate_limit_delay = rate_limit_delay
        self._server_error_delay = server_error_delay

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        return headers

    async def _post(self, path: str, body: dict[str, Any], max_attempts: int) -> Any:
        descriptor = RequestDescriptor(
            url=f"{self._base_url}{path}",
            method="POST",
            json=body,
            headers=self._headers(),
            timeout=self._timeout,
        )
        response = await request_with_retry(
            self._fetcher,
            descriptor,
            max_attempts=max_attempts,
            rate_limit_delay=self._rate_limit_delay,
            server_error_delay=self._server_error_delay,
        )
        return parse_json(response)

    async def _call_rpc(self, body: dict[str, Any], max_attempts: int) -> Any:
        envelope = BackendEnvelope.model_validate(
            await self._post(self.FUNCTION_PATH, body, max_attempts)
        )
        if envelope.error:
            raise FetchError(envelope.error, url=f"{self._base_url}{self.FUNCTION_PATH}")
        return envelope.data

    async def call(self, action: Any) -> Any:
        """
        Execute une action RPC et retourne le champ `data` de la reponse.

        Args:
            action: Instance d'un des modeles de BackendAction

        Returns:
            Donnees brutes renvoyees par le backend
        """
        attempts = 1 if action.action in MUTATING_ACTIONS else self._max_attempts
        logger.debug(f"Backend action: {action.action}")
        return await self._call_rpc(to_payload(action), attempts)

    async def get_sources(self) -> list[ContentSource]:
        rows = await self.call(GetSources()) or []
        return parse_rows(rows, ContentSource.from_row, "Sources")

    async def get_repositories(self) -> list[Repository]:
        rows = await self.call(GetRepositories()) or []
        return parse_rows(rows, Repository.from_row, "Depots")

    async def get_plugins(self) -> list[Plugin]:
        rows = await self.call(GetPlugins()) or []
        return parse_rows(rows, Plugin.from_row, "Plugins")

    async def add_plugin(self, plugin: PluginPayload) -> bool:
        data = await self.call(AddPlugin(data=plugin))
        return MutationResponse.model_validate(data or {}).success

    async def add_repository(self, repository: RepositoryPayload) -> bool:
        data = await self.call(AddRepository(data=repository))
        return MutationResponse.model_validate(data or {}).success

    async def sync_sources(self) -> bool:
        data = await self.call(SyncSources())
        return MutationResponse.model_validate(data or {}).success

    async def sync_content(self) -> bool:
        """Marque les depots actifs comme synchronises."""
        data = await self.call(SyncContent())
        return MutationResponse.model_validate(data or {}).success

    async def search_content(
        self,
        query: str,
        sources: Sequence[str],
        language: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ContentSearchResult:
        action = SearchContent(
            query=query,
            sources=list(sources),
            options=SearchOptions(language=language, page=page, page_size=page_size),
        )
        response = SearchContentResponse.model_validate(await self.call(action) or {})
        # Une recherche sur une source unique attribue ses resultats a cette source
        default_source = sources[0] if len(sources) == 1 else None
        items = tuple(
            parse_rows(
                response.results,
                lambda row: AggregatedContentItem.from_payload(
                    row, source_id=row.get("source_id") or default_source
                ),
                "Resultats de recherche",
            )
        )
        return ContentSearchResult(
            items=items,
            has_more=response.has_more,
            total_results=response.total_results,
        )

    async def get_content_details(
        self, content_id: str, source_id: str
    ) -> Optional[AggregatedContentItem]:
        data = await self.call(GetContentDetails(content_id=content_id, source_id=source_id))
        if not data:
            return None
        return parse_one(
            data,
            lambda payload: AggregatedContentItem.from_payload(payload, source_id=source_id),
            f"Details {source_id}/{content_id}",
        )

    async def parse_repository(self, repo_url: str) -> RepositoryParseResult:
        """Demande au backend d'analyser un depot de plugins."""
        data = await self.call(ParseRepository(repo_url=repo_url))
        response = ParseRepositoryResponse.model_validate(data or {})
        return RepositoryParseResult(
            plugins=tuple(parse_rows(response.plugins, Plugin.from_row, "Plugins du depot")),
            sources=tuple(parse_rows(response.sources, ContentSource.from_row, "Sources du depot")),
        )

    async def upsert_sources(self, sources: Sequence[ContentSource]) -> bool:
        """
        Enregistre (ou met a jour) des sources par leur nom.

        Utilise la fonction de synchronisation dediee, hors du point RPC.
        """
        body = {"action": "syncSources", "sources": [s.to_row() for s in sources]}
        data = await self._post(self.SYNC_FUNCTION_PATH, body, max_attempts=1)
        return isinstance(data, dict) and bool(data.get("success"))
