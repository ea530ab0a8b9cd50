"""Publish/subscribe primitive shared by the pipeline components."""

import logging
from typing import Any, Callable, List, Union

from .errors import CallbackExecutionError

logger = logging.getLogger(__name__)

Subscriber = Union[Callable[..., Any], Any]


class Subscription:
    """Handle returned by ObserverSubject.subscribe(); cancel() removes it."""

    def __init__(self, subject: "ObserverSubject", callback: Callable[..., Any]):
        self._subject = subject
        self.callback = callback

    @property
    def active(self) -> bool:
        return self._subject is not None and self in self._subject._subscriptions

    def cancel(self):
        """Stop receiving notifications. Safe to call more than once."""
        if self._subject is not None:
            self._subject._remove(self)
            self._subject = None


class ObserverSubject:
    """
    List of subscribers notified in subscription order.

    A subscriber is either a plain callable or an object exposing an
    ``update(*args)`` method; both are normalized to a callable at
    subscription time. An exception raised by one subscriber is logged and
    does not prevent the remaining subscribers from being notified.
    """

    def __init__(self, name: str = "subject"):
        self.name = name
        self._subscriptions: List[Subscription] = []

    def subscribe(self, subscriber: Subscriber) -> Subscription:
        """Register a subscriber and return its subscription handle."""
        if callable(subscriber):
            callback = subscriber
        elif callable(getattr(subscriber, "update", None)):
            callback = subscriber.update
        else:
            raise TypeError(
                f"Subscriber must be callable or have an update() method, got {type(subscriber).__name__}"
            )
        subscription = Subscription(self, callback)
        self._subscriptions = self._subscriptions + [subscription]
        return subscription

    def _remove(self, subscription: Subscription):
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    def notify(self, *args, **kwargs) -> int:
        """
        Call every subscriber with the given arguments.

        Returns:
            Number of subscribers that completed without raising.
        """
        delivered = 0
        # Iterate over a snapshot so subscribers may unsubscribe while notified
        for subscription in list(self._subscriptions):
            try:
                subscription.callback(*args, **kwargs)
                delivered += 1
            except Exception as e:
                err = CallbackExecutionError(self.name, e)
                logger.error(f"{err}", exc_info=True)
        return delivered

    def __len__(self) -> int:
        return len(self._subscriptions)

    def clear(self):
        """Drop every subscription."""
        for subscription in list(self._subscriptions):
            subscription._subject = None
        self._subscriptions = []
