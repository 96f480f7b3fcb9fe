# notifications/services.py
# Notification fan-out: append unread records, count them, mark them read

import logging

from django.conf import settings

from core.realtime import hub
from core.store import store_guard
from .models import Notification

logger = logging.getLogger("teamup.notifications")


def _unread_queryset(user_id):
    return Notification.objects.filter(to_user_id=user_id, read=False)


def _recent_queryset(user_id, limit):
    return Notification.objects.filter(to_user_id=user_id).order_by("-created_at", "-id")[:limit]


def write_notification(to_user_id, from_user_id, type, *, from_user_name="", team=None, team_name="", message=None):
    """Not store-guarded: the membership protocol calls this inside its transaction."""
    notification = Notification.objects.create(
        to_user_id=to_user_id,
        from_user_id=from_user_id,
        from_user_name=from_user_name or "",
        type=type,
        team=team,
        team_name=team_name or (team.name if team is not None else ""),
        message=message,
    )
    logger.info(f"Notification {type} created for user {to_user_id} (from {from_user_id})")
    return notification


@store_guard(default=None)
def create_notification(to_user_id, from_user_id, type, **kwargs):
    return write_notification(to_user_id, from_user_id, type, **kwargs)


@store_guard(default=list)
def get_notifications(user_id, limit=None):
    limit = limit or settings.NOTIFICATION_PAGE_SIZE
    return list(_recent_queryset(user_id, limit))


def subscribe_to_notifications(user_id, on_update, limit=None):
    limit = limit or settings.NOTIFICATION_PAGE_SIZE
    return hub.subscribe(
        Notification,
        lambda: list(_recent_queryset(user_id, limit)),
        on_update,
    )


@store_guard(default=0)
def mark_notification_as_read(notification_id, user_id=None):
    """
    Flip one notification to read. Already-read rows are left alone so
    `read` never goes back to false.

    When `user_id` is given only that user's notification is touched.
    """
    qs = Notification.objects.filter(pk=notification_id, read=False)
    if user_id is not None:
        qs = qs.filter(to_user_id=user_id)

    updated = qs.update(read=True)
    if updated:
        hub.publish(Notification)
    return updated


@store_guard(default=0)
def mark_all_notifications_as_read(user_id, ids=None):
    qs = _unread_queryset(user_id)
    if ids:
        qs = qs.filter(id__in=ids)

    updated = qs.update(read=True)
    if updated:
        hub.publish(Notification)
        logger.info(f"Marked {updated} notifications read for user {user_id}")
    return updated


@store_guard(default=0)
def get_unread_notification_count(user_id):
    return _unread_queryset(user_id).count()


def subscribe_to_unread_count(user_id, on_update):
    """Live unread counter; re-delivered on every create or mark-read."""
    return hub.subscribe(
        Notification,
        lambda: _unread_queryset(user_id).count(),
        on_update,
        default=0,
    )
