"""Publish/subscribe bus pushing full session snapshots to observers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from .schema import SessionSnapshot

LOGGER = logging.getLogger("cognitiveAgent.notifier")

Observer = Callable[[Dict[str, Any]], None]


class Subscription:
    """Handle returned by :meth:`NotificationBus.subscribe`.

    Usable as a context manager; leaving the block unsubscribes.
    """

    def __init__(self, bus: "NotificationBus", observer: Observer) -> None:
        self._bus = bus
        self.observer = observer
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._bus._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class NotificationBus:
    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._closed = False

    def subscribe(self, observer: Observer) -> Subscription:
        if self._closed:
            raise RuntimeError("Notification bus is closed")
        subscription = Subscription(self, observer)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def publish(self, snapshot: SessionSnapshot) -> None:
        """Deliver a fresh serialized copy of ``snapshot`` to every observer.

        A failing observer is logged and does not affect the others.
        """
        for subscription in list(self._subscriptions):
            payload = snapshot.model_dump(mode="json")
            try:
                subscription.observer(payload)
            except Exception as e:
                LOGGER.exception(f"Observer {subscription.observer!r} failed: {e}")

    def close(self) -> None:
        """Drop every subscription; later subscribe() calls fail."""
        for subscription in list(self._subscriptions):
            subscription.active = False
        self._subscriptions.clear()
        self._closed = True

    def __len__(self) -> int:
        return len(self._subscriptions)
