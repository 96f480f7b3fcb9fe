# users/services.py
# Profile registry: CRUD over profiles + discover-people queries

import logging

from django.conf import settings
from django.db import transaction
from urllib.parse import quote

from core.realtime import hub
from core.store import store_guard
from .models import Profile

logger = logging.getLogger("teamup.users")

# Membership fields are owned by teams.membership
MEMBERSHIP_FIELDS = ("team", "team_id", "is_team_leader")


def default_avatar_url(name):
    return settings.AVATAR_URL_TEMPLATE.format(seed=quote(name or "User", safe=""))


@store_guard(default=None)
def get_profile(user_id):
    return Profile.objects.filter(pk=user_id).first()


@store_guard(default=None)
def create_profile(user_id, **fields):
    """
    Create (or overwrite) the profile document for `user_id`.

    A fresh profile is never on a team. Overwriting an existing profile
    replaces every other field but keeps `team` and `is_team_leader`,
    which only the membership protocol may change. Whatever the caller
    passes for those two is ignored.
    """
    return write_profile(user_id, **fields)


def write_profile(user_id, **fields):
    """`create_profile` without the store guard, for callers inside a transaction."""
    for name in MEMBERSHIP_FIELDS:
        fields.pop(name, None)

    with transaction.atomic():
        existing = Profile.objects.select_for_update().filter(pk=user_id).first()
        profile = Profile(user_id=user_id, **fields)

        if existing is None:
            profile.team = None
            profile.is_team_leader = False
            profile.save(force_insert=True)
        else:
            profile.team_id = existing.team_id
            profile.is_team_leader = existing.is_team_leader
            profile.created_at = existing.created_at
            profile.save(force_update=True)

    logger.info(f"Profile {'created' if existing is None else 'overwritten'} for user {user_id}")
    return profile


@store_guard(default=0)
def update_profile(user_id, **fields):
    """
    Unchecked partial merge. Callers are trusted to keep the membership
    invariants; the registry performs no validation.

    Returns the number of rows written (0 if the profile does not exist).
    """
    if not fields:
        return 0

    profile = Profile.objects.filter(pk=user_id).first()
    if profile is None:
        return 0

    for attr, value in fields.items():
        setattr(profile, attr, value)
    profile.save(update_fields=[_field_name(attr) for attr in fields])
    return 1


def _field_name(attr):
    # "team_id" is accepted but update_fields wants the field name
    return attr[:-3] if attr.endswith("_id") else attr


# -----------------------------
# DISCOVER PEOPLE
# -----------------------------
def _all_users_queryset(exclude_user_id=None):
    qs = Profile.objects.order_by("-created_at", "-pk")
    if exclude_user_id is not None:
        qs = qs.exclude(pk=exclude_user_id)
    return qs


def _available_users_queryset(exclude_user_id=None):
    return _all_users_queryset(exclude_user_id).filter(team__isnull=True)


@store_guard(default=list)
def get_all_users(exclude_user_id=None):
    return list(_all_users_queryset(exclude_user_id))


@store_guard(default=list)
def get_available_users(exclude_user_id=None):
    """Profiles that are not on a team yet."""
    return list(_available_users_queryset(exclude_user_id))


@store_guard(default=list)
def get_available_users_by_role(role, exclude_user_id=None):
    return list(_available_users_queryset(exclude_user_id).filter(primary_role=role))


@store_guard(default=list)
def get_available_roles():
    """Distinct primary roles currently used by at least one profile."""
    roles = (
        Profile.objects
        .exclude(primary_role="")
        .order_by("primary_role")
        .values_list("primary_role", flat=True)
        .distinct()
    )
    return list(roles)


def subscribe_to_all_users(exclude_user_id, on_update):
    return hub.subscribe(
        Profile,
        lambda: list(_all_users_queryset(exclude_user_id)),
        on_update,
    )
