"""
Espacement minimal entre appels successifs d'un meme flux logique.

Le RateController garantit que deux dispatchs consecutifs sont separes d'au
moins min_interval secondes, mesure depuis le debut du dispatch precedent.
Les appels ne sont jamais abandonnes ni fusionnes: ils attendent leur tour.

Usage:
    controller = RateController(min_interval=0.1)

    @throttled(controller)
    async def fetch_movie(movie_id):
        ...

    # ou directement
    data = await controller.run(fetch_movie, 550)
"""

import asyncio
import functools
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


class RateController:
    """
    Controleur d'espacement pour un flux d'appels asynchrones.

    Chaque instance possede son propre etat: le chemin qu'elle protege est
    determine par les appelants qui la partagent.

    Attributes:
        min_interval: Intervalle minimal entre deux dispatchs (secondes)
    """

    def __init__(
        self,
        min_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialise le controleur.

        Args:
            min_interval: Intervalle minimal entre deux dispatchs (secondes)
            clock: Horloge monotone (injectable pour les tests)
            sleep: Fonction d'attente asynchrone (injectable pour les tests)
        """
        if min_interval < 0:
            raise ValueError("min_interval doit etre positif")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._next_slot: Optional[float] = None
        self.throttled_count = 0

    async def acquire(self) -> float:
        """
        Attend que le creneau suivant soit disponible.

        Le creneau est reserve avant l'attente: des appelants arrives en rafale
        sont servis dans leur ordre d'arrivee, chacun espace du precedent.

        Returns:
            Instant de dispatch reserve (selon l'horloge du controleur)
        """
        now = self._clock()
        slot = now if self._next_slot is None else max(now, self._next_slot)
        self._next_slot = slot + self.min_interval

        delay = slot - now
        if delay > 0:
            self.throttled_count += 1
            logger.debug(f"Rate limiting: attente de {delay:.3f}s")
            await self._sleep(delay)
        return slot

    async def run(
        self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Execute l'operation une fois le creneau obtenu."""
        await self.acquire()
        return await operation(*args, **kwargs)

    def reset(self) -> None:
        """Oublie le dernier dispatch (le prochain appel part immediatement)."""
        self._next_slot = None


def throttled(controller: RateController):
    """
    Decorateur appliquant un RateController a une fonction async.

    Args:
        controller: Controleur partage par toutes les fonctions du flux

    Returns:
        Decorateur a appliquer sur une fonction async
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await controller.run(func, *args, **kwargs)

        return wrapper

    return decorator
