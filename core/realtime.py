# core/realtime.py
"""
In-process live queries.

A subscription watches one or more models and re-delivers the *full* result
of its query every time a row of a watched model is saved or deleted. There
is no diffing: consumers always receive a complete snapshot.

    sub = hub.subscribe(Notification, lambda: list(qs), on_update)
    ...
    sub.cancel()

Deliveries triggered by writes run after the surrounding transaction
commits, so a snapshot never contains uncommitted rows. Bulk `update()` /
`delete()` calls bypass model signals; code using them calls
`hub.publish(Model)` itself.
"""
import logging
import threading

from django.db import transaction
from django.db.models.signals import post_delete, post_save

from core.store import STORE_UNAVAILABLE_ERRORS

logger = logging.getLogger("teamup.realtime")


class Subscription:
    def __init__(self, hub, models, query, on_update, default):
        self.hub = hub
        self.models = models
        self.query = query
        self.on_update = on_update
        self.default = default
        self._active = True
        # Re-entrant so a callback may cancel its own subscription
        self._lock = threading.RLock()

    @property
    def active(self):
        return self._active

    def refresh(self):
        if not self._active:
            return

        try:
            snapshot = self.query()
        except STORE_UNAVAILABLE_ERRORS as e:
            logger.error(f"Subscription query failed, delivering empty snapshot: {e}")
            snapshot = self.default() if callable(self.default) else self.default

        with self._lock:
            if self._active:
                self.on_update(snapshot)

    def cancel(self):
        """Stop delivery. Once this returns, `on_update` is not called again."""
        with self._lock:
            if not self._active:
                return
            self._active = False
        self.hub.unsubscribe(self)

    def __repr__(self):
        labels = ", ".join(m._meta.label for m in self.models)
        return f"<Subscription [{labels}] active={self._active}>"


class SubscriptionHub:
    def __init__(self):
        self._subscriptions = {}
        self._connected = set()
        self._lock = threading.Lock()

    def subscribe(self, models, query, on_update, default=list):
        """
        Register a live query and deliver its first snapshot immediately.

        Args:
            models: model class (or tuple of classes) whose writes refresh the query
            query: zero-arg callable returning the full snapshot
            on_update: callback receiving each snapshot
            default: value (or factory) delivered when the store is unreachable
        """
        if not isinstance(models, (list, tuple)):
            models = (models,)

        subscription = Subscription(self, tuple(models), query, on_update, default)

        with self._lock:
            for model in subscription.models:
                self._connect(model)
                self._subscriptions.setdefault(model, []).append(subscription)

        subscription.refresh()
        return subscription

    def unsubscribe(self, subscription):
        with self._lock:
            for model in subscription.models:
                subs = self._subscriptions.get(model, [])
                if subscription in subs:
                    subs.remove(subscription)

    def subscriber_count(self, model):
        with self._lock:
            return len(self._subscriptions.get(model, []))

    def publish(self, model):
        """Schedule a refresh of every subscription watching `model`."""
        with self._lock:
            subscriptions = list(self._subscriptions.get(model, []))

        if not subscriptions:
            return

        def deliver():
            for subscription in subscriptions:
                subscription.refresh()

        transaction.on_commit(deliver)

    def _connect(self, model):
        if model in self._connected:
            return

        uid = f"realtime-{id(self)}-{model._meta.label}"
        post_save.connect(self._on_change, sender=model, weak=False, dispatch_uid=f"{uid}-save")
        post_delete.connect(self._on_change, sender=model, weak=False, dispatch_uid=f"{uid}-delete")
        self._connected.add(model)
        logger.debug(f"Realtime hub watching {model._meta.label}")

    def _on_change(self, sender, **kwargs):
        self.publish(sender)


hub = SubscriptionHub()
