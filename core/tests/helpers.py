from collections import Counter

from django.contrib.auth import get_user_model

from teams.models import Invitation, Team, TeamMember
from users.models import Profile
from users.services import create_profile

User = get_user_model()


def make_person(username, primary_role="", full_name=None, skills=None):
    """User + profile with no team."""
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass1234",
    )
    create_profile(
        user.pk,
        email=user.email,
        full_name=full_name if full_name is not None else username.title(),
        primary_role=primary_role,
        skills=skills or [],
    )
    return user


class MembershipInvariantsMixin:
    """Checks profile <-> roster <-> invitation consistency across the whole store."""

    def assertMembershipConsistent(self):
        # profile.team lists the profile on its roster, and vice versa
        for profile in Profile.objects.exclude(team=None):
            self.assertTrue(
                TeamMember.objects.filter(team_id=profile.team_id, user_id=profile.pk).exists(),
                f"profile {profile.pk} points at team {profile.team_id} but is not on its roster",
            )
        for member in TeamMember.objects.all():
            self.assertEqual(
                Profile.objects.get(pk=member.user_id).team_id,
                member.team_id,
                f"roster entry {member} disagrees with the profile",
            )

        # capacity
        for team in Team.objects.all():
            self.assertLessEqual(team.roster.count(), team.max_members, f"team {team.pk} over capacity")

        # at most one pending invitation per (from_user, team)
        pending = Counter(
            Invitation.objects
            .filter(status=Invitation.STATUS_PENDING)
            .values_list("from_user_id", "team_id")
        )
        for pair, count in pending.items():
            self.assertEqual(count, 1, f"{count} pending invitations for {pair}")

        # leader flag only on the leader of the profile's own team
        for profile in Profile.objects.filter(is_team_leader=True).select_related("team"):
            self.assertIsNotNone(profile.team)
            self.assertEqual(profile.team.leader_id, profile.pk)
