"""Append-only audit log of successful vault operations."""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

DEPOSIT = "Deposit"
WITHDRAW = "Withdraw"
RATE_PER_SECOND_UPDATED = "RatePerSecondUpdated"
PAUSED_SET = "PausedSet"
ASSET_RESCUED = "AssetRescued"

EVENT_KINDS = (DEPOSIT, WITHDRAW, RATE_PER_SECOND_UPDATED, PAUSED_SET, ASSET_RESCUED)


@dataclass(frozen=True)
class VaultEvent:
    """A single audit record."""
    sequence: int
    kind: str
    timestamp: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Observer = Callable[[VaultEvent], None]


class AuditLog:
    """Ordered event records with observer notification.

    record() stores an event and stages it; observers only see staged events
    once publish() is called, which the vault does after an operation has
    committed. truncate() discards records (staged or not) of a rolled-back
    operation. An observer that raises is logged and skipped, it cannot undo
    an operation that already happened.
    """

    def __init__(self):
        self._events: List[VaultEvent] = []
        self._pending: List[VaultEvent] = []
        self._observers: List[Observer] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[VaultEvent]:
        return iter(list(self._events))

    @property
    def events(self) -> List[VaultEvent]:
        return list(self._events)

    @property
    def pending(self) -> List[VaultEvent]:
        """Recorded events not yet delivered to observers."""
        return list(self._pending)

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def record(self, kind: str, timestamp: int, **data: Any) -> VaultEvent:
        """
        Append an event and stage it for publication.

        Args:
            kind: One of EVENT_KINDS
            timestamp: Time of the operation
            **data: Event payload

        Returns:
            The stored event
        """
        if kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind: {kind}")
        event = VaultEvent(sequence=len(self._events), kind=kind, timestamp=timestamp, data=data)
        self._events.append(event)
        self._pending.append(event)
        return event

    def publish(self) -> int:
        """Deliver staged events to observers in order. Returns how many were delivered."""
        pending, self._pending = self._pending, []
        for event in pending:
            for observer in list(self._observers):
                try:
                    observer(event)
                except Exception:
                    logger.exception(
                        "Audit observer failed",
                        extra={"event": "audit.observer_failed", "kind": event.kind,
                               "sequence": event.sequence},
                    )
        return len(pending)

    def filter(self, kind: Optional[str] = None) -> List[VaultEvent]:
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.kind == kind]

    def truncate(self, length: int) -> None:
        del self._events[length:]
        self._pending = [e for e in self._pending if e.sequence < length]
