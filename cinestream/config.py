"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe
CINESTREAM_, et peut optionnellement être fournie via un fichier .env.

Les clés d'accès (TMDB, backend) sont optionnelles - les appels correspondants
partent alors sans authentification et échoueront côté serveur.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinestream.adapters.api.iptv_client import CHANNEL_MIRRORS, STREAM_MIRRORS

# Trouver le fichier .env à la racine du projet (parent de cinestream/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe CINESTREAM_.
    Exemple : CINESTREAM_REQUEST_TIMEOUT=5

    Les durées sont exprimées en secondes.
    """

    model_config = SettingsConfigDict(
        env_prefix="CINESTREAM_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Métadonnées (TMDB)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3")
    tmdb_language: str = Field(default="en-US")

    # Backend fédéré
    backend_url: str = Field(default="http://localhost:54321")
    backend_api_key: Optional[str] = Field(default=None)

    # Annuaire des chaînes (miroir principal puis secours)
    channel_mirrors: list[str] = Field(default_factory=lambda: list(CHANNEL_MIRRORS))
    stream_mirrors: list[str] = Field(default_factory=lambda: list(STREAM_MIRRORS))

    # Résilience
    request_timeout: float = Field(default=10.0, gt=0)
    rate_limit_interval: float = Field(default=0.1, ge=0)
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_rate_limit_delay: float = Field(default=2.0, ge=0)
    retry_server_error_delay: float = Field(default=1.0, ge=0)

    # Caches
    metadata_cache_ttl: float = Field(default=15 * 60, gt=0)
    cache_size_limit: int = Field(default=64 * 1024 * 1024, ge=1024)
    cache_dir: Optional[Path] = Field(default=None)
    stream_cache_clear_interval: float = Field(default=30 * 60, gt=0)

    # Recherche fédérée
    search_page_size: int = Field(default=20, ge=1)
    per_source_limit: int = Field(default=50, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    # Chaine vide ou None: pas de fichier de log, console uniquement
    log_file: Optional[Path] = Field(default=Path("logs/cinestream.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Optional[str | Path]) -> Optional[Path]:
        """Étend ~ vers le répertoire home dans les chemins."""
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @field_validator("channel_mirrors", "stream_mirrors")
    @classmethod
    def require_mirror(cls, v: list[str]) -> list[str]:
        """Au moins une URL est nécessaire par document."""
        if not v:
            raise ValueError("au moins une URL de miroir est requise")
        return v

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return self.tmdb_api_key is not None

    @property
    def cache_directory(self) -> Optional[str]:
        """Répertoire du cache sous forme de chaîne (None = temporaire)."""
        return str(self.cache_dir) if self.cache_dir is not None else None
