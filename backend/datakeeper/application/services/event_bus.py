"""In-process publish/subscribe bus for data-change notifications."""

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# ── Event names ───────────────────────────────────────────────────

COMPANY_DATA_CHANGED = "company-data-changed"
COMPANY_DATA_RESTORED = "companyDataRestored"
CLIENTS_DATA_CHANGED = "clients-data-changed"
DATA_CONFLICT_RESOLVED = "data-conflict-resolved"
DATA_VERSION_RESTORED = "data-version-restored"
BACKUP_CREATED = "backup-created"
NOTIFICATION = "notification"

ALL_EVENTS = (
    COMPANY_DATA_CHANGED,
    COMPANY_DATA_RESTORED,
    CLIENTS_DATA_CHANGED,
    DATA_CONFLICT_RESOLVED,
    DATA_VERSION_RESTORED,
    BACKUP_CREATED,
    NOTIFICATION,
)

CHANGED_EVENTS = {
    "company": COMPANY_DATA_CHANGED,
    "clients": CLIENTS_DATA_CHANGED,
}

EventHandler = Callable[[str, dict[str, Any]], None]


@dataclass
class Subscription:
    id: int
    event_name: str
    handler: EventHandler
    _bus: "EventBus" = field(repr=False)

    def unsubscribe(self) -> None:
        self._bus.unsubscribe(self.id)


class EventBus:
    """Synchronous fan-out of named events to registered handlers.

    Handlers run in subscription order on the publisher's call stack. A
    handler that raises is logged and skipped; the remaining handlers and
    the publisher carry on.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(self, event_name: str, handler: EventHandler) -> Subscription:
        subscription = Subscription(next(self._ids), event_name, handler, self)
        self._subscriptions[subscription.id] = subscription
        return subscription

    def unsubscribe(self, subscription_id: int) -> bool:
        return self._subscriptions.pop(subscription_id, None) is not None

    def publish(self, event_name: str, payload: dict[str, Any] | None = None) -> int:
        """Deliver an event; returns how many handlers completed without error."""
        payload = payload or {}
        # Copy so handlers may unsubscribe while being called
        targets = [s for s in self._subscriptions.values() if s.event_name == event_name]
        delivered = 0
        for subscription in targets:
            try:
                subscription.handler(event_name, payload)
                delivered += 1
            except Exception:
                logger.exception(
                    "Subscriber %d failed handling %s", subscription.id, event_name
                )
        return delivered

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        """Publish a user-facing notification (toast)."""
        self.publish(
            NOTIFICATION,
            {"title": title, "description": description, "variant": variant},
        )

    def subscriber_count(self, event_name: str | None = None) -> int:
        if event_name is None:
            return len(self._subscriptions)
        return sum(1 for s in self._subscriptions.values() if s.event_name == event_name)
