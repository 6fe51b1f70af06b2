"""
Schemas des actions du point d'entree RPC du backend.

Chaque action est un modele pydantic distinct, discrimine par le champ
`action`. BackendAction est l'union etiquetee de toutes les actions: un
payload inconnu est rejete a la validation plutot qu'envoye tel quel.

Les noms de champs sur le fil suivent le backend (camelCase pour les
actions de recherche), exposes en snake_case cote Python via des alias.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Action(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PluginPayload(BaseModel):
    """Plugin a enregistrer."""

    name: str
    url: str
    repository: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    is_enabled: bool = True


class RepositoryPayload(BaseModel):
    """Depot a enregistrer."""

    name: str
    url: str
    author: Optional[str] = None
    description: Optional[str] = None
    is_enabled: bool = True


class SearchOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    language: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, alias="pageSize")


class GetSources(_Action):
    action: Literal["get_sources"] = "get_sources"


class GetRepositories(_Action):
    action: Literal["get_repositories"] = "get_repositories"


class GetPlugins(_Action):
    action: Literal["get_plugins"] = "get_plugins"


class AddPlugin(_Action):
    action: Literal["add_plugin"] = "add_plugin"
    data: PluginPayload


class AddRepository(_Action):
    action: Literal["add_repository"] = "add_repository"
    data: RepositoryPayload


class SyncSources(_Action):
    action: Literal["sync_sources"] = "sync_sources"


class SyncContent(_Action):
    action: Literal["sync_content"] = "sync_content"


class SearchContent(_Action):
    action: Literal["search_content"] = "search_content"
    query: str
    sources: list[str] = Field(default_factory=list)
    options: SearchOptions = Field(default_factory=SearchOptions)


class GetContentDetails(_Action):
    action: Literal["get_content_details"] = "get_content_details"
    content_id: str = Field(alias="contentId")
    source_id: str = Field(alias="sourceId")


class ParseRepository(_Action):
    action: Literal["parse_repository"] = "parse_repository"
    repo_url: str = Field(alias="repoUrl")


BackendAction = Annotated[
    Union[
        GetSources,
        GetRepositories,
        GetPlugins,
        AddPlugin,
        AddRepository,
        SyncSources,
        SyncContent,
        SearchContent,
        GetContentDetails,
        ParseRepository,
    ],
    Field(discriminator="action"),
]

backend_action_adapter: TypeAdapter = TypeAdapter(BackendAction)

# Actions qui modifient l'etat du backend: jamais relancees automatiquement
MUTATING_ACTIONS = frozenset({"add_plugin", "add_repository", "sync_sources", "sync_content"})


def to_payload(action: _Action) -> dict[str, Any]:
    """Serialise une action pour le fil (alias camelCase, None omis)."""
    return action.model_dump(by_alias=True, exclude_none=True)


def parse_action(payload: dict[str, Any]) -> _Action:
    """Valide un payload brut et retourne l'action typee correspondante."""
    return backend_action_adapter.validate_python(payload)


class BackendEnvelope(BaseModel):
    """Enveloppe de reponse: {"data": ...} ou {"error": "..."}."""

    data: Any = None
    error: Optional[str] = None


class SearchContentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: list[dict[str, Any]] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="hasMore")
    total_results: Optional[int] = Field(default=None, alias="totalResults")


class ParseRepositoryResponse(BaseModel):
    plugins: list[dict[str, Any]] = Field(default_factory=list)
    sources: list[dict[str, Any]] = Field(default_factory=list)


class MutationResponse(BaseModel):
    success: bool = False
