"""
Notifications de changement emises par le backend.

Le backend publie les insertions, mises a jour et suppressions sur quatre
types d'enregistrements (contenus, sources, plugins, depots). Le transport
(websocket temps reel) pousse les payloads bruts dans ChangeFeed, qui les
convertit et les distribue aux abonnes.

Usage:
    feed = ChangeFeed()
    unsubscribe = feed.subscribe(aggregator.handle_change)
    feed.publish_payload({"table": "cloudstream_sources", "eventType": "INSERT"})
    unsubscribe()
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from loguru import logger


class RecordType(Enum):
    """Types d'enregistrements observes, avec leur table backend."""

    CONTENT = "cloudstream_content"
    SOURCES = "cloudstream_sources"
    PLUGINS = "cloudstream_plugins"
    REPOSITORIES = "cloudstream_repositories"


class ChangeEvent(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeNotification:
    """
    Changement sur un enregistrement du backend.

    Attributes:
        record_type: Type d'enregistrement modifie
        event: Nature du changement
        new: Nouvelle valeur de la ligne (INSERT/UPDATE)
        old: Ancienne valeur de la ligne (UPDATE/DELETE)
    """

    record_type: RecordType
    event: ChangeEvent
    new: dict[str, Any] = field(default_factory=dict, hash=False)
    old: dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ChangeNotification":
        """
        Construit une notification depuis un payload postgres_changes.

        Raises:
            ValueError: Si la table ou l'evenement est inconnu
        """
        table = payload.get("table")
        try:
            record_type = RecordType(table)
        except ValueError:
            raise ValueError(f"Table non suivie: {table!r}") from None
        event_name = str(payload.get("eventType", "")).upper()
        try:
            event = ChangeEvent(event_name)
        except ValueError:
            raise ValueError(f"Evenement inconnu: {event_name!r}") from None
        return cls(
            record_type=record_type,
            event=event,
            new=dict(payload.get("new") or {}),
            old=dict(payload.get("old") or {}),
        )


Subscriber = Callable[[ChangeNotification], Any]


class ChangeFeed:
    """Distribution synchrone des notifications aux abonnes."""

    def __init__(self) -> None:
        self._subscribers: list[tuple[Subscriber, frozenset[RecordType]]] = []

    def subscribe(
        self,
        callback: Subscriber,
        record_types: Optional[Iterable[RecordType]] = None,
    ) -> Callable[[], None]:
        """
        Abonne un callback aux notifications.

        Args:
            callback: Appele pour chaque notification retenue
            record_types: Types suivis (tous si None)

        Returns:
            Fonction de desabonnement
        """
        entry = (callback, frozenset(record_types or RecordType))
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, notification: ChangeNotification) -> int:
        """
        Distribue une notification aux abonnes concernes.

        Un abonne en erreur est trace sans empecher la distribution aux autres.

        Returns:
            Nombre d'abonnes notifies avec succes
        """
        delivered = 0
        for callback, record_types in list(self._subscribers):
            if notification.record_type not in record_types:
                continue
            try:
                callback(notification)
                delivered += 1
            except Exception:
                logger.exception(
                    f"Abonne en erreur sur {notification.record_type.name} "
                    f"{notification.event.value}"
                )
        return delivered

    def publish_payload(self, payload: dict[str, Any]) -> int:
        """Convertit un payload brut puis le distribue."""
        return self.publish(ChangeNotification.from_payload(payload))

    def __len__(self) -> int:
        return len(self._subscribers)
