# teams/membership.py
"""
Invitation / membership protocol.

Keeps three things consistent:

    profile.team  <->  team roster (TeamMember rows)  <->  invitation.status

Every mutating operation runs inside `membership_transaction`, which opens
one database transaction and row-locks the team first, then the involved
profiles in primary-key order. Preconditions are checked on the locked rows
immediately before the writes, so a concurrent caller either sees the
committed result or waits for it.

Invariants after every operation:
- a profile's team (if any) lists that profile on its roster
- roster size <= team.max_members
- at most one pending invitation per (from_user, team)
- an accepted/rejected invitation never changes again
- is_team_leader is true only for the leader of the profile's team
"""
from contextlib import contextmanager
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from core.exceptions import (
    AlreadyInTeam,
    DuplicateRequest,
    Forbidden,
    InvitationAlreadyResolved,
    InvitationNotFound,
    ProfileNotFound,
    TeamFull,
    TeamNotFound,
)
from core.models import FeedPost
from core.realtime import hub
from core.services import FeedService
from core.store import store_guard
from notifications.models import Notification
from notifications.services import write_notification
from users.models import Profile
from .models import Invitation, Team, TeamMember

logger = logging.getLogger("teamup.teams")

RESPONSE_STATUSES = (Invitation.STATUS_ACCEPTED, Invitation.STATUS_REJECTED)
DEFAULT_MEMBER_ROLE = "Member"


class MembershipState:
    """Locked rows visible inside a membership transaction."""

    def __init__(self, team, profiles):
        self.team = team
        self.profiles = profiles

    def profile(self, user_id):
        return self.profiles.get(user_id)

    def roster_size(self):
        if self.team is None:
            return 0
        return TeamMember.objects.filter(team=self.team).count()


@contextmanager
def membership_transaction(team_id, *user_ids):
    """
    Atomic unit for membership changes.

    Locks the team (when `team_id` is given) and then each profile in
    `user_ids`. Missing rows come back as None; callers decide which
    absence is an error.
    """
    with transaction.atomic():
        team = None
        if team_id is not None:
            team = Team.objects.select_for_update().filter(pk=team_id).first()

        ids = sorted({uid for uid in user_ids if uid is not None})
        profiles = {
            p.pk: p
            for p in Profile.objects.select_for_update().filter(pk__in=ids).order_by("pk")
        }
        yield MembershipState(team, profiles)


def _display_name(profile, fallback="User"):
    return profile.display_name if profile is not None else fallback


# -----------------------------
# SEND
# -----------------------------
@store_guard(default=None)
def send_invitation(from_user_id, to_user_id, team_id, type, message=None):
    """
    Create a pending invite (leader -> candidate) or join request
    (candidate -> leader) and notify `to_user`.

    Raises:
        ProfileNotFound: the joining party has no profile
        AlreadyInTeam: the joining party is already on a team
        TeamNotFound: the team does not exist
        DuplicateRequest: a pending invitation from this sender for this team exists
    """
    if type not in (Invitation.TYPE_INVITE, Invitation.TYPE_JOIN_REQUEST):
        raise ValueError(f"Unknown invitation type: {type}")

    is_join_request = type == Invitation.TYPE_JOIN_REQUEST
    joining_user_id = Invitation.joining_party(type, from_user_id, to_user_id)

    with membership_transaction(team_id, from_user_id, to_user_id) as state:
        joining = state.profile(joining_user_id)
        if joining is None:
            raise ProfileNotFound()
        if joining.team_id:
            logger.warning(
                f"Rejected {type}: user {joining_user_id} already in team {joining.team_id}"
            )
            raise AlreadyInTeam("You are already in a team" if is_join_request else "User is already in a team")

        team = state.team
        if team is None:
            raise TeamNotFound()

        duplicate_message = "Join request already sent" if is_join_request else "Invitation already sent"
        if _pending_exists(from_user_id, team.pk):
            logger.warning(f"Rejected duplicate {type}: user {from_user_id}, team {team.pk}")
            raise DuplicateRequest(duplicate_message)

        sender = state.profile(from_user_id)
        recipient = state.profile(to_user_id)

        try:
            with transaction.atomic():
                invitation = Invitation.objects.create(
                    team=team,
                    team_name=team.name,
                    from_user_id=from_user_id,
                    from_user_name=_display_name(sender),
                    to_user_id=to_user_id,
                    to_user_name=_display_name(recipient),
                    joining_user_id=joining_user_id,
                    type=type,
                    message=message,
                )
        except IntegrityError:
            # A concurrent sender won the race on the pending-unique constraint
            if _pending_exists(from_user_id, team.pk):
                raise DuplicateRequest(duplicate_message)
            raise

        write_notification(
            to_user_id,
            from_user_id,
            Notification.TYPE_JOIN_REQUEST if is_join_request else Notification.TYPE_INVITE,
            from_user_name=invitation.from_user_name,
            team=team,
            message=message,
        )

    logger.info(f"Invitation {invitation.pk} ({type}) sent: {from_user_id} -> {to_user_id}, team {team.pk}")
    return invitation


def _pending_exists(from_user_id, team_id):
    return Invitation.objects.filter(
        from_user_id=from_user_id,
        team_id=team_id,
        status=Invitation.STATUS_PENDING,
    ).exists()


# -----------------------------
# RESPOND
# -----------------------------
@store_guard(default=None)
def respond_to_invitation(invitation_id, status, *, responder_id=None, role=None):
    """
    Accept or reject a pending invitation.

    Accepting adds the joining party to the team (same checks as
    `add_team_member`). Either way `from_user` is notified. The status is
    written exactly once; answering a resolved invitation raises
    InvitationAlreadyResolved and sends nothing.
    """
    if status not in RESPONSE_STATUSES:
        raise ValueError(f"Invalid response status: {status}")

    invitation = Invitation.objects.filter(pk=invitation_id).first()
    if invitation is None:
        raise InvitationNotFound()
    if responder_id is not None and responder_id != invitation.to_user_id:
        raise Forbidden("Only the recipient can respond to this invitation")

    accepted = status == Invitation.STATUS_ACCEPTED
    joining_user_id = invitation.joining_user_id

    with membership_transaction(invitation.team_id, invitation.from_user_id, invitation.to_user_id) as state:
        # Re-read under lock: another responder may have been first
        invitation = Invitation.objects.select_for_update().filter(pk=invitation_id).first()
        if invitation is None:
            raise InvitationNotFound()
        if not invitation.is_pending:
            logger.warning(f"Invitation {invitation_id} already {invitation.status}")
            raise InvitationAlreadyResolved()

        team = state.team
        joining = state.profile(joining_user_id)

        if accepted:
            if joining is None:
                raise ProfileNotFound()
            if joining.team_id:
                raise AlreadyInTeam("User is already in a team")
            if team is None:
                raise TeamNotFound("Team no longer exists")
            if state.roster_size() >= team.max_members:
                raise TeamFull()

        invitation.status = status
        invitation.responded_at = timezone.now()
        invitation.save(update_fields=["status", "responded_at"])

        responder = state.profile(invitation.to_user_id)
        responder_name = _display_name(responder)

        if accepted:
            joining_role = joining.primary_role or role or DEFAULT_MEMBER_ROLE
            _add_team_member(team.pk, joining_user_id, joining_role)

            if invitation.is_join_request:
                message = f"Your request to join {invitation.team_name} was accepted!"
            else:
                message = f"{_display_name(joining)} accepted your invitation to join {invitation.team_name}"
            notification_type = Notification.TYPE_ACCEPTED
        else:
            if invitation.is_join_request:
                message = f"Your request to join {invitation.team_name} was declined"
            else:
                message = f"{invitation.to_user_name or responder_name} declined your invitation to join {invitation.team_name}"
            notification_type = Notification.TYPE_REJECTED

        write_notification(
            invitation.from_user_id,
            invitation.to_user_id,
            notification_type,
            from_user_name=responder_name,
            team=team,
            team_name=invitation.team_name,
            message=message,
        )

    logger.info(f"Invitation {invitation_id} {status} by user {invitation.to_user_id}")
    return invitation


# -----------------------------
# ROSTER
# -----------------------------
@store_guard(default=None)
def add_team_member(team_id, user_id, role):
    """
    Put `user_id` on the team's roster and point their profile at the team.

    Raises ProfileNotFound, AlreadyInTeam, TeamNotFound or TeamFull.
    """
    return _add_team_member(team_id, user_id, role)


def _add_team_member(team_id, user_id, role):
    with membership_transaction(team_id, user_id) as state:
        profile = state.profile(user_id)
        if profile is None:
            raise ProfileNotFound()
        if profile.team_id:
            raise AlreadyInTeam("User is already in a team")

        team = state.team
        if team is None:
            raise TeamNotFound()
        if state.roster_size() >= team.max_members:
            logger.warning(f"Team {team.pk} is full ({team.max_members}), refusing user {user_id}")
            raise TeamFull()

        user_name = profile.display_name
        try:
            with transaction.atomic():
                member = TeamMember.objects.create(team=team, user_id=user_id, role=role, user_name=user_name)
        except IntegrityError:
            raise AlreadyInTeam("User is already in a team")

        profile.team = team
        profile.is_team_leader = False
        profile.save(update_fields=["team", "is_team_leader"])

        FeedService.write_post(
            user_id,
            FeedPost.TYPE_MEMBER_JOINED,
            f"🎉 Joined team: {team.name}",
            f"{user_name} joined as {role}",
            team=team,
            profile=profile,
        )

    logger.info(f"User {user_id} joined team {team_id} as {role}")
    return member


@store_guard(default=False)
def remove_team_member(team_id, user_id):
    """
    Take `user_id` off the roster and clear their profile.

    The leader cannot be removed (there is no succession); terminate the
    team instead. Removing someone who is not on the roster is a no-op
    and returns False.
    """
    with membership_transaction(team_id, user_id) as state:
        team = state.team
        if team is None:
            raise TeamNotFound()
        if team.leader_id == user_id:
            raise Forbidden("Team leaders cannot leave. Terminate the team instead.")

        deleted, _ = TeamMember.objects.filter(team=team, user_id=user_id).delete()
        if not deleted:
            logger.warning(f"User {user_id} is not on team {team_id}, nothing to remove")
            return False

        profile = state.profile(user_id)
        if profile is not None and profile.team_id == team.pk:
            profile.team = None
            profile.is_team_leader = False
            profile.save(update_fields=["team", "is_team_leader"])

    logger.info(f"User {user_id} removed from team {team_id}")
    return True


@store_guard(default=False)
def terminate_team(team_id, leader_id):
    """
    Leader-only. Frees every member, deletes the team's invitations and
    then the team itself (roster and workspace log go with it).
    """
    with membership_transaction(team_id) as state:
        team = state.team
        if team is None:
            raise TeamNotFound()
        if team.leader_id != leader_id:
            logger.warning(f"User {leader_id} tried to terminate team {team_id} led by {team.leader_id}")
            raise Forbidden("Only team leader can terminate the team")

        member_ids = list(team.roster.values_list("user_id", flat=True))
        cleared = (
            Profile.objects
            .filter(Q(pk__in=member_ids) | Q(team=team))
            .update(team=None, is_team_leader=False)
        )
        invitations_deleted, _ = Invitation.objects.filter(team=team).delete()
        team.delete()

        hub.publish(Profile)

    logger.info(
        f"Team {team_id} terminated by {leader_id}: "
        f"{cleared} profiles cleared, {invitations_deleted} invitations deleted"
    )
    return True


# -----------------------------
# QUERIES
# -----------------------------
def _incoming(user_id):
    return Invitation.objects.filter(to_user_id=user_id, status=Invitation.STATUS_PENDING)


def _outgoing(user_id):
    return Invitation.objects.filter(from_user_id=user_id)


def _join_requests(team_id):
    return Invitation.objects.filter(
        team_id=team_id,
        type=Invitation.TYPE_JOIN_REQUEST,
        status=Invitation.STATUS_PENDING,
    )


@store_guard(default=list)
def get_incoming_invitations(user_id):
    return list(_incoming(user_id))


@store_guard(default=list)
def get_outgoing_invitations(user_id):
    return list(_outgoing(user_id))


@store_guard(default=list)
def get_join_requests(team_id):
    return list(_join_requests(team_id))


def subscribe_to_invitations(user_id, on_update):
    """`on_update(incoming, outgoing)` on every invitation change."""
    return hub.subscribe(
        Invitation,
        lambda: (list(_incoming(user_id)), list(_outgoing(user_id))),
        lambda snapshot: on_update(*snapshot),
        default=lambda: ([], []),
    )


def subscribe_to_join_requests(team_id, on_update):
    return hub.subscribe(Invitation, lambda: list(_join_requests(team_id)), on_update)
