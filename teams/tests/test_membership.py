from unittest import mock

from django.db import IntegrityError, OperationalError, transaction
from django.test import TestCase

from core.exceptions import (
    AlreadyInTeam,
    DuplicateRequest,
    Forbidden,
    InvitationAlreadyResolved,
    NotFound,
    TeamFull,
    TeamNotFound,
)
from core.models import FeedPost
from core.tests.helpers import MembershipInvariantsMixin, make_person
from notifications.models import Notification
from teams.membership import (
    add_team_member,
    get_incoming_invitations,
    get_outgoing_invitations,
    remove_team_member,
    respond_to_invitation,
    send_invitation,
    terminate_team,
)
from teams.models import Invitation, Team, TeamMember
from teams.services import create_team
from users.models import Profile


class MembershipTestBase(MembershipInvariantsMixin, TestCase):
    def setUp(self):
        self.leader = make_person("leader", Profile.ROLE_FRONTEND, full_name="Lena Leader")
        self.x = make_person("xavier", Profile.ROLE_BACKEND, full_name="Xavier")
        self.y = make_person("yara", Profile.ROLE_DESIGNER, full_name="Yara")

        self.team = create_team(self.leader.pk, "Rocket", "Hackathon build", max_members=5)

    def profile(self, user):
        return Profile.objects.get(pk=user.pk)

    def roster_ids(self, team=None):
        team = team or self.team
        return list(TeamMember.objects.filter(team=team).values_list("user_id", flat=True))


class SendInvitationTests(MembershipTestBase):
    def test_invite_creates_pending_invitation_and_notifies_candidate(self):
        invitation = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE, "Join us")

        self.assertEqual(invitation.status, Invitation.STATUS_PENDING)
        self.assertEqual(invitation.joining_user_id, self.x.pk)
        self.assertEqual(invitation.team_name, "Rocket")
        self.assertEqual(invitation.from_user_name, "Lena Leader")
        self.assertEqual(invitation.to_user_name, "Xavier")

        note = Notification.objects.get(to_user=self.x)
        self.assertEqual(note.type, Notification.TYPE_INVITE)
        self.assertEqual(note.from_user_id, self.leader.pk)
        self.assertEqual(note.team_id, self.team.pk)
        self.assertEqual(note.message, "Join us")
        self.assertFalse(note.read)
        self.assertMembershipConsistent()

    def test_join_request_joining_party_is_sender(self):
        invitation = send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        self.assertEqual(invitation.joining_user_id, self.x.pk)
        self.assertTrue(invitation.is_join_request)
        self.assertEqual(
            Notification.objects.get(to_user=self.leader).type,
            Notification.TYPE_JOIN_REQUEST,
        )

    def test_join_request_from_member_of_another_team_is_rejected(self):
        # Y already leads T1 and asks to join Rocket
        create_team(self.y.pk, "T1", "")

        with self.assertRaises(AlreadyInTeam) as ctx:
            send_invitation(self.y.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        self.assertEqual(str(ctx.exception.detail), "You are already in a team")
        self.assertFalse(Invitation.objects.filter(from_user=self.y).exists())
        self.assertMembershipConsistent()

    def test_invite_to_user_already_in_team_is_rejected(self):
        create_team(self.x.pk, "Other", "")

        with self.assertRaises(AlreadyInTeam) as ctx:
            send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        self.assertEqual(str(ctx.exception.detail), "User is already in a team")
        self.assertEqual(Invitation.objects.count(), 0)

    def test_duplicate_invite_is_rejected(self):
        send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        with self.assertRaises(DuplicateRequest) as ctx:
            send_invitation(self.leader.pk, self.y.pk, self.team.pk, Invitation.TYPE_INVITE)

        # pending uniqueness is per (sender, team)
        self.assertEqual(str(ctx.exception.detail), "Invitation already sent")
        self.assertEqual(Invitation.objects.count(), 1)
        self.assertMembershipConsistent()

    def test_duplicate_join_request_is_rejected(self):
        send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        with self.assertRaises(DuplicateRequest) as ctx:
            send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        self.assertEqual(str(ctx.exception.detail), "Join request already sent")
        self.assertEqual(Notification.objects.filter(to_user=self.leader).count(), 1)

    def test_store_refuses_second_pending_invitation(self):
        send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Invitation.objects.create(
                    team=self.team,
                    from_user=self.x,
                    to_user=self.leader,
                    joining_user=self.x,
                    type=Invitation.TYPE_JOIN_REQUEST,
                )

    def test_new_request_allowed_after_rejection(self):
        first = send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)
        respond_to_invitation(first.pk, Invitation.STATUS_REJECTED)

        second = send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        self.assertNotEqual(first.pk, second.pk)
        self.assertEqual(second.status, Invitation.STATUS_PENDING)
        self.assertMembershipConsistent()

    def test_missing_team(self):
        with self.assertRaises(TeamNotFound):
            send_invitation(self.x.pk, self.leader.pk, 999999, Invitation.TYPE_JOIN_REQUEST)

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            send_invitation(self.leader.pk, self.x.pk, self.team.pk, "poke")

    def test_incoming_and_outgoing(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        self.assertEqual([i.pk for i in get_incoming_invitations(self.x.pk)], [invite.pk])
        self.assertEqual([i.pk for i in get_outgoing_invitations(self.leader.pk)], [invite.pk])
        self.assertEqual(get_incoming_invitations(self.leader.pk), [])

        respond_to_invitation(invite.pk, Invitation.STATUS_REJECTED)

        # incoming only lists pending, outgoing keeps history
        self.assertEqual(get_incoming_invitations(self.x.pk), [])
        self.assertEqual(len(get_outgoing_invitations(self.leader.pk)), 1)


class RespondToInvitationTests(MembershipTestBase):
    def test_accepted_join_request_adds_member(self):
        # team at 2/5
        add_team_member(self.team.pk, self.y.pk, Profile.ROLE_DESIGNER)
        request = send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        respond_to_invitation(request.pk, Invitation.STATUS_ACCEPTED, responder_id=self.leader.pk)

        self.assertEqual(self.profile(self.x).team_id, self.team.pk)
        self.assertFalse(self.profile(self.x).is_team_leader)
        self.assertEqual(len(self.roster_ids()), 3)

        note = Notification.objects.get(to_user=self.x, type=Notification.TYPE_ACCEPTED)
        self.assertEqual(note.message, "Your request to join Rocket was accepted!")
        self.assertEqual(note.from_user_id, self.leader.pk)

        request.refresh_from_db()
        self.assertEqual(request.status, Invitation.STATUS_ACCEPTED)
        self.assertIsNotNone(request.responded_at)
        self.assertMembershipConsistent()

    def test_accepted_invite_notifies_leader(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        respond_to_invitation(invite.pk, Invitation.STATUS_ACCEPTED, responder_id=self.x.pk)

        self.assertIn(self.x.pk, self.roster_ids())
        member = TeamMember.objects.get(user=self.x)
        self.assertEqual(member.role, Profile.ROLE_BACKEND)

        note = Notification.objects.get(to_user=self.leader, type=Notification.TYPE_ACCEPTED)
        self.assertEqual(note.message, "Xavier accepted your invitation to join Rocket")
        self.assertMembershipConsistent()

    def test_rejection_never_touches_membership(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)
        roster_before = self.roster_ids()

        respond_to_invitation(invite.pk, Invitation.STATUS_REJECTED)

        self.assertEqual(self.roster_ids(), roster_before)
        self.assertIsNone(self.profile(self.x).team_id)

        notes = Notification.objects.filter(to_user=self.leader)
        self.assertEqual([n.type for n in notes], [Notification.TYPE_REJECTED])
        self.assertEqual(notes[0].message, "Xavier declined your invitation to join Rocket")
        self.assertMembershipConsistent()

    def test_rejected_join_request_message(self):
        request = send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        respond_to_invitation(request.pk, Invitation.STATUS_REJECTED)

        note = Notification.objects.get(to_user=self.x)
        self.assertEqual(note.type, Notification.TYPE_REJECTED)
        self.assertEqual(note.message, "Your request to join Rocket was declined")

    def test_status_is_one_way(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)
        respond_to_invitation(invite.pk, Invitation.STATUS_REJECTED)
        notifications_before = Notification.objects.count()

        with self.assertRaises(InvitationAlreadyResolved):
            respond_to_invitation(invite.pk, Invitation.STATUS_ACCEPTED)

        # resolved counts as not found
        with self.assertRaises(NotFound):
            respond_to_invitation(invite.pk, Invitation.STATUS_REJECTED)

        invite.refresh_from_db()
        self.assertEqual(invite.status, Invitation.STATUS_REJECTED)
        self.assertEqual(Notification.objects.count(), notifications_before)
        self.assertIsNone(self.profile(self.x).team_id)

    def test_missing_invitation(self):
        with self.assertRaises(NotFound):
            respond_to_invitation(424242, Invitation.STATUS_ACCEPTED)

    def test_only_recipient_may_respond(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        with self.assertRaises(Forbidden):
            respond_to_invitation(invite.pk, Invitation.STATUS_ACCEPTED, responder_id=self.y.pk)

        invite.refresh_from_db()
        self.assertTrue(invite.is_pending)

    def test_pending_is_not_a_response(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)
        with self.assertRaises(ValueError):
            respond_to_invitation(invite.pk, Invitation.STATUS_PENDING)

    def test_accept_into_full_team_fails_and_stays_pending(self):
        small = create_team(self.y.pk, "Duo", "", max_members=1)
        request = send_invitation(self.x.pk, self.y.pk, small.pk, Invitation.TYPE_JOIN_REQUEST)

        with self.assertRaises(TeamFull):
            respond_to_invitation(request.pk, Invitation.STATUS_ACCEPTED)

        request.refresh_from_db()
        self.assertTrue(request.is_pending)
        self.assertIsNone(self.profile(self.x).team_id)
        self.assertMembershipConsistent()

    def test_accept_after_joining_elsewhere_fails(self):
        first = send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)
        other = create_team(self.y.pk, "Other", "")
        second = send_invitation(self.x.pk, self.y.pk, other.pk, Invitation.TYPE_JOIN_REQUEST)

        respond_to_invitation(second.pk, Invitation.STATUS_ACCEPTED)

        with self.assertRaises(AlreadyInTeam):
            respond_to_invitation(first.pk, Invitation.STATUS_ACCEPTED)

        first.refresh_from_db()
        self.assertTrue(first.is_pending)
        self.assertEqual(self.profile(self.x).team_id, other.pk)
        self.assertMembershipConsistent()

    def test_role_fallback_when_profile_has_no_role(self):
        blank = make_person("blank", "")
        request = send_invitation(blank.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        respond_to_invitation(request.pk, Invitation.STATUS_ACCEPTED, role="Tester")
        self.assertEqual(TeamMember.objects.get(user=blank).role, "Tester")

    def test_role_defaults_to_member(self):
        blank = make_person("blank", "")
        request = send_invitation(blank.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)

        respond_to_invitation(request.pk, Invitation.STATUS_ACCEPTED)
        self.assertEqual(TeamMember.objects.get(user=blank).role, "Member")


class RosterTests(MembershipTestBase):
    def test_add_member_updates_profile_and_feed(self):
        add_team_member(self.team.pk, self.x.pk, "Backend Developer")

        profile = self.profile(self.x)
        self.assertEqual(profile.team_id, self.team.pk)
        self.assertFalse(profile.is_team_leader)

        post = FeedPost.objects.get(type=FeedPost.TYPE_MEMBER_JOINED)
        self.assertEqual(post.title, "🎉 Joined team: Rocket")
        self.assertEqual(post.description, "Xavier joined as Backend Developer")
        self.assertEqual(post.author_id, self.x.pk)
        self.assertMembershipConsistent()

    def test_full_team_rejects_new_member(self):
        self.team.max_members = 5
        self.team.save()
        for i in range(4):
            add_team_member(self.team.pk, make_person(f"m{i}").pk, "Member")
        roster_before = self.roster_ids()

        with self.assertRaises(TeamFull):
            add_team_member(self.team.pk, self.x.pk, "Member")

        self.assertEqual(self.roster_ids(), roster_before)
        self.assertIsNone(self.profile(self.x).team_id)
        self.assertMembershipConsistent()

    def test_member_of_another_team_cannot_be_added(self):
        add_team_member(self.team.pk, self.x.pk, "Member")
        other = create_team(self.y.pk, "Other", "")

        with self.assertRaises(AlreadyInTeam):
            add_team_member(other.pk, self.x.pk, "Member")

        self.assertEqual(self.profile(self.x).team_id, self.team.pk)
        self.assertMembershipConsistent()

    def test_add_to_missing_team(self):
        with self.assertRaises(TeamNotFound):
            add_team_member(999999, self.x.pk, "Member")

    def test_remove_member(self):
        add_team_member(self.team.pk, self.x.pk, "Member")

        self.assertTrue(remove_team_member(self.team.pk, self.x.pk))

        self.assertNotIn(self.x.pk, self.roster_ids())
        profile = self.profile(self.x)
        self.assertIsNone(profile.team_id)
        self.assertFalse(profile.is_team_leader)
        self.assertMembershipConsistent()

    def test_removing_non_member_is_noop(self):
        self.assertFalse(remove_team_member(self.team.pk, self.x.pk))
        self.assertEqual(self.roster_ids(), [self.leader.pk])

    def test_leader_cannot_be_removed(self):
        with self.assertRaises(Forbidden):
            remove_team_member(self.team.pk, self.leader.pk)

        self.assertEqual(self.profile(self.leader).team_id, self.team.pk)
        self.assertTrue(self.profile(self.leader).is_team_leader)
        self.assertMembershipConsistent()

    def test_removed_member_can_join_again(self):
        add_team_member(self.team.pk, self.x.pk, "Member")
        remove_team_member(self.team.pk, self.x.pk)

        add_team_member(self.team.pk, self.x.pk, "Member")
        self.assertIn(self.x.pk, self.roster_ids())


class TerminateTeamTests(MembershipTestBase):
    def test_terminate_clears_everyone(self):
        add_team_member(self.team.pk, self.x.pk, "Member")
        add_team_member(self.team.pk, self.y.pk, "Member")
        outsider = make_person("outsider", Profile.ROLE_TESTER)
        send_invitation(outsider.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)
        team_id = self.team.pk

        terminate_team(team_id, self.leader.pk)

        for user in (self.leader, self.x, self.y):
            profile = self.profile(user)
            self.assertIsNone(profile.team_id)
            self.assertFalse(profile.is_team_leader)

        self.assertFalse(Team.objects.filter(pk=team_id).exists())
        self.assertFalse(Invitation.objects.filter(team_id=team_id).exists())
        self.assertFalse(TeamMember.objects.filter(team_id=team_id).exists())
        self.assertMembershipConsistent()

    def test_only_leader_can_terminate(self):
        add_team_member(self.team.pk, self.x.pk, "Member")

        with self.assertRaises(Forbidden) as ctx:
            terminate_team(self.team.pk, self.x.pk)

        self.assertEqual(str(ctx.exception.detail), "Only team leader can terminate the team")
        self.assertTrue(Team.objects.filter(pk=self.team.pk).exists())
        self.assertEqual(self.profile(self.x).team_id, self.team.pk)

    def test_terminate_missing_team(self):
        with self.assertRaises(TeamNotFound):
            terminate_team(999999, self.leader.pk)

    def test_notifications_survive_termination(self):
        send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        terminate_team(self.team.pk, self.leader.pk)

        note = Notification.objects.get(to_user=self.x)
        self.assertIsNone(note.team_id)
        self.assertEqual(note.team_name, "Rocket")


class StoreFailureRollbackTests(MembershipTestBase):
    """A store error part-way through an operation leaves nothing behind."""

    def test_failed_notification_rolls_back_acceptance(self):
        invite = send_invitation(self.leader.pk, self.x.pk, self.team.pk, Invitation.TYPE_INVITE)

        with mock.patch.object(Notification.objects, "create", side_effect=OperationalError("database is locked")):
            self.assertIsNone(respond_to_invitation(invite.pk, Invitation.STATUS_ACCEPTED))

        invite.refresh_from_db()
        self.assertEqual(invite.status, Invitation.STATUS_PENDING)
        self.assertIsNone(invite.responded_at)
        self.assertFalse(TeamMember.objects.filter(user=self.x).exists())
        self.assertIsNone(self.profile(self.x).team_id)
        self.assertFalse(Notification.objects.filter(type=Notification.TYPE_ACCEPTED).exists())
        self.assertMembershipConsistent()

    def test_failed_notification_rolls_back_send(self):
        with mock.patch.object(Notification.objects, "create", side_effect=OperationalError("database is locked")):
            self.assertIsNone(
                send_invitation(self.x.pk, self.leader.pk, self.team.pk, Invitation.TYPE_JOIN_REQUEST)
            )

        self.assertFalse(Invitation.objects.exists())

    def test_failed_feed_post_rolls_back_join(self):
        with mock.patch.object(FeedPost.objects, "create", side_effect=OperationalError("database is locked")):
            self.assertIsNone(add_team_member(self.team.pk, self.x.pk, "Member"))

        self.assertFalse(TeamMember.objects.filter(user=self.x).exists())
        self.assertIsNone(self.profile(self.x).team_id)
        self.assertMembershipConsistent()

    def test_failed_feed_post_rolls_back_team_creation(self):
        with mock.patch.object(FeedPost.objects, "create", side_effect=OperationalError("database is locked")):
            self.assertIsNone(create_team(self.y.pk, "Comet"))

        self.assertFalse(Team.objects.filter(name="Comet").exists())
        self.assertFalse(self.profile(self.y).is_team_leader)
        self.assertMembershipConsistent()
