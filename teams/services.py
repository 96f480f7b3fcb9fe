# teams/services.py
# Team registry: create/read/update teams, roster views, workspace log

import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F

from core.exceptions import AlreadyInTeam, ProfileNotFound
from core.models import FeedPost
from core.realtime import hub
from core.services import FeedService
from core.store import store_guard
from users.models import Profile
from .membership import membership_transaction
from .models import Team, TeamMember, WorkspaceLog

logger = logging.getLogger("teamup.teams")


@store_guard(default=None)
def create_team(leader_id, name, description="", *, max_members=None, status=Team.STATUS_FORMING,
                roles_needed=None, hackathon=None):
    """
    Create a team led by `leader_id`.

    The roster starts with the leader alone; the leader's profile is pointed
    at the team and flagged `is_team_leader`. A leader who already belongs to
    a team is rejected with AlreadyInTeam.
    """
    roles_needed = list(roles_needed or [])

    with membership_transaction(None, leader_id) as state:
        leader = state.profile(leader_id)
        if leader is None:
            raise ProfileNotFound()
        if leader.team_id:
            logger.warning(f"User {leader_id} tried to create a team while in team {leader.team_id}")
            raise AlreadyInTeam("You are already in a team")

        leader_name = leader.display_name
        team = Team.objects.create(
            name=name,
            description=description or "",
            hackathon=hackathon,
            leader_id=leader_id,
            leader_name=leader_name,
            max_members=max_members or settings.TEAM_DEFAULT_MAX_MEMBERS,
            status=status,
            roles_needed=roles_needed,
        )

        try:
            with transaction.atomic():
                TeamMember.objects.create(team=team, user_id=leader_id, role=Team.LEADER_ROLE, user_name=leader_name)
        except IntegrityError:
            raise AlreadyInTeam("You are already in a team")

        leader.team = team
        leader.is_team_leader = True
        leader.save(update_fields=["team", "is_team_leader"])

        FeedService.write_post(
            leader_id,
            FeedPost.TYPE_TEAM_CREATED,
            f"🚀 Created team: {name}",
            description,
            team=team,
            profile=leader,
            roles_needed=roles_needed,
        )

    logger.info(f"Team {team.pk} '{team.name}' created by user {leader_id}")
    return team


@store_guard(default=None)
def get_team(team_id):
    return Team.objects.filter(pk=team_id).first()


@store_guard(default=0)
def update_team(team_id, **fields):
    """
    Unchecked partial merge of descriptive fields. Membership is never
    changed through here; see teams.membership.
    """
    if not fields:
        return 0

    team = Team.objects.filter(pk=team_id).first()
    if team is None:
        return 0

    for attr, value in fields.items():
        setattr(team, attr, value)
    team.save(update_fields=list(fields))
    logger.info(f"Team {team_id} updated: {', '.join(fields)}")
    return 1


# -----------------------------
# LOOKUPS
# -----------------------------
def _user_teams(user_id):
    profile = Profile.objects.select_related("team").filter(pk=user_id).first()
    if profile is None or profile.team is None:
        return []
    return [profile.team]


def _available_teams():
    return (
        Team.objects
        .filter(status=Team.STATUS_FORMING)
        .annotate(roster_size=Count("roster"))
        .filter(roster_size__lt=F("max_members"))
        .order_by("-created_at", "-id")
    )


@store_guard(default=list)
def get_user_teams(user_id):
    """The caller's team as a one-element list, or []."""
    return _user_teams(user_id)


def subscribe_to_user_teams(user_id, on_update):
    return hub.subscribe((Profile, Team), lambda: _user_teams(user_id), on_update)


@store_guard(default=list)
def list_available_teams():
    """Forming teams with room left, newest first."""
    return list(_available_teams())


def subscribe_to_available_teams(on_update):
    return hub.subscribe((Team, TeamMember), lambda: list(_available_teams()), on_update)


def _team_members(team_id):
    roster = TeamMember.objects.filter(team_id=team_id).select_related("user__profile")
    return [
        {
            "id": f"{team_id}-{member.user_id}",
            "team_id": member.team_id,
            "user_id": member.user_id,
            "role": member.role,
            "user_name": member.user_name,
            "joined_at": member.joined_at,
            "profile": getattr(member.user, "profile", None),
        }
        for member in roster
    ]


@store_guard(default=list)
def get_team_members(team_id):
    """Roster entries joined with each member's profile, in join order."""
    return _team_members(team_id)


def subscribe_to_team_members(team_id, on_update):
    return hub.subscribe((TeamMember, Profile), lambda: _team_members(team_id), on_update)


# -----------------------------
# WORKSPACE LOG
# -----------------------------
def _workspace_logs(team_id):
    return WorkspaceLog.objects.filter(team_id=team_id).order_by("-created_at", "-id")


@store_guard(default=None)
def add_workspace_log(team_id, user_id, user_name, message):
    entry = WorkspaceLog.objects.create(
        team_id=team_id,
        user_id=user_id,
        user_name=user_name or "User",
        message=message,
    )
    logger.info(f"Workspace log {entry.pk} added to team {team_id} by user {user_id}")
    return entry


@store_guard(default=list)
def get_workspace_logs(team_id):
    return list(_workspace_logs(team_id))


def subscribe_to_workspace_logs(team_id, on_update):
    return hub.subscribe(WorkspaceLog, lambda: list(_workspace_logs(team_id)), on_update)
