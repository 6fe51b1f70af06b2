"""
Fixtures pytest partagees pour les tests CineStream.

Ce module contient les fixtures communes utilisees dans les tests:
- Horloge et attente simulees (tests de fraicheur et d'espacement)
- Settings de test avec repertoires temporaires
- Cache TTL isole par test
"""

from pathlib import Path
from typing import Iterator

import pytest

from cinestream.adapters.api.cache import TTLCache
from cinestream.config import Settings


class FakeClock:
    """Horloge manuelle: le temps n'avance que via advance()."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Attente simulee: enregistre les delais et avance l'horloge associee."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.clock.advance(delay)


@pytest.fixture
def clock() -> FakeClock:
    """Horloge simulee demarrant a t=1000."""
    return FakeClock()


@pytest.fixture
def fake_sleep(clock: FakeClock) -> FakeSleep:
    """Attente simulee liee a l'horloge du test."""
    return FakeSleep(clock)


@pytest.fixture
def ttl_cache(tmp_path: Path, clock: FakeClock) -> Iterator[TTLCache]:
    """Cache TTL de 15 minutes dans un repertoire temporaire, horloge simulee."""
    cache = TTLCache(ttl=900, directory=str(tmp_path / "cache"), clock=clock)
    yield cache
    cache.close()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler cache et logs de chaque test.
    """
    return Settings(
        tmdb_api_key="test_api_key",
        backend_url="https://backend.example.com",
        backend_api_key="anon-key",
        cache_dir=tmp_path / "cache",
        log_file=tmp_path / "test.log",
        rate_limit_interval=0.0,
        retry_rate_limit_delay=0.0,
        retry_server_error_delay=0.0,
    )
