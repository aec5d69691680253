"""Readiness notification fan-out shared by sandbox adapters."""

import logging

from buildpilot.domain.interfaces import ReadyCallback, Subscription
from buildpilot.domain.models import ReadyEvent

logger = logging.getLogger(__name__)


class CallbackSubscription(Subscription):
    """Subscription removing its callback from a ReadyNotifier."""

    def __init__(self, notifier: "ReadyNotifier", callback: ReadyCallback) -> None:
        self._notifier = notifier
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def callback(self) -> ReadyCallback:
        return self._callback

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._notifier._detach(self)


class ReadyNotifier:
    """Multi-fire readiness channel with explicit subscribe/unsubscribe."""

    def __init__(self) -> None:
        self._subscriptions: list[CallbackSubscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: ReadyCallback) -> Subscription:
        subscription = CallbackSubscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def notify(self, event: ReadyEvent) -> None:
        logger.debug(
            "Ready on port %d (%s) -> %d subscriber(s)",
            event.port,
            event.url,
            len(self._subscriptions),
        )
        for subscription in list(self._subscriptions):
            if subscription.active:
                subscription.callback(event)

    def clear(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.unsubscribe()

    def _detach(self, subscription: CallbackSubscription) -> None:
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]
