from django.contrib.auth import get_user_model
from django.test import TestCase

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from core.tests.helpers import MembershipInvariantsMixin, make_person
from teams.services import create_team
from users.models import Profile
from users.services import (
    create_profile,
    default_avatar_url,
    get_all_users,
    get_available_roles,
    get_available_users,
    get_available_users_by_role,
    get_profile,
    subscribe_to_all_users,
    update_profile,
)

User = get_user_model()


class ProfileRegistryTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="alice", email="alice@example.com", password="pass1234")

    def test_create_never_puts_profile_on_a_team(self):
        leader = make_person("leader")
        team = create_team(leader.pk, "Rocket")

        profile = create_profile(self.user.pk, full_name="Alice", team=team, is_team_leader=True)

        self.assertIsNone(profile.team_id)
        self.assertFalse(profile.is_team_leader)

    def test_create_overwrites_existing_profile(self):
        create_profile(self.user.pk, full_name="Alice", bio="first")
        create_profile(self.user.pk, full_name="Alice B")

        self.assertEqual(Profile.objects.filter(pk=self.user.pk).count(), 1)
        self.assertEqual(get_profile(self.user.pk).full_name, "Alice B")

    def test_overwrite_keeps_membership(self):
        create_profile(self.user.pk, full_name="Alice")
        team = create_team(self.user.pk, "Rocket")
        created_at = get_profile(self.user.pk).created_at

        profile = create_profile(self.user.pk, full_name="Alice B", team=None, is_team_leader=False)

        self.assertEqual(profile.team_id, team.pk)
        self.assertTrue(profile.is_team_leader)
        self.assertEqual(get_profile(self.user.pk).created_at, created_at)

    def test_get_missing_profile(self):
        self.assertIsNone(get_profile(self.user.pk))

    def test_update_is_partial_merge(self):
        create_profile(self.user.pk, full_name="Alice", college="CIT")

        self.assertEqual(update_profile(self.user.pk, bio="Hello", primary_role=Profile.ROLE_TESTER), 1)

        profile = get_profile(self.user.pk)
        self.assertEqual(profile.bio, "Hello")
        self.assertEqual(profile.primary_role, Profile.ROLE_TESTER)
        self.assertEqual(profile.college, "CIT")

    def test_update_missing_profile(self):
        self.assertEqual(update_profile(self.user.pk, bio="x"), 0)

    def test_default_avatar(self):
        self.assertEqual(
            default_avatar_url("Alice Sharma"),
            "https://api.dicebear.com/7.x/initials/svg?seed=Alice%20Sharma",
        )

    def test_discover_queries(self):
        create_profile(self.user.pk, full_name="Alice", primary_role=Profile.ROLE_TESTER)
        designer = make_person("dan", Profile.ROLE_DESIGNER)
        busy = make_person("busy", Profile.ROLE_DESIGNER)
        create_team(busy.pk, "Busy team")

        self.assertEqual({p.pk for p in get_all_users(exclude_user_id=self.user.pk)}, {designer.pk, busy.pk})
        self.assertEqual({p.pk for p in get_available_users()}, {self.user.pk, designer.pk})
        self.assertEqual(
            [p.pk for p in get_available_users_by_role(Profile.ROLE_DESIGNER)],
            [designer.pk],
        )
        self.assertEqual(get_available_roles(), [Profile.ROLE_TESTER, Profile.ROLE_DESIGNER])

    def test_people_list_is_live(self):
        seen = []
        sub = subscribe_to_all_users(self.user.pk, seen.append)
        self.addCleanup(sub.cancel)

        with self.captureOnCommitCallbacks(execute=True):
            newcomer = make_person("nina")

        self.assertEqual(seen[0], [])
        self.assertEqual([p.pk for p in seen[-1]], [newcomer.pk])


class ProfileAPITests(MembershipInvariantsMixin, APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="alice", email="alice@example.com", password="pass1234")
        self.other = make_person("bob", Profile.ROLE_BACKEND)
        self.client.force_authenticate(user=self.user)

    def test_me_before_setup_is_404(self):
        response = self.client.get("/api/users/profiles/me/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_profile_setup(self):
        payload = {
            "full_name": "Alice Sharma",
            "college": "CIT",
            "year_of_study": "Second Year",
            "primary_role": "Frontend Developer",
            "skills": [{"name": "React", "proficiency": "Pro"}],
            "bio": "Hi!",
        }

        response = self.client.post("/api/users/profiles/", payload, format="json")

        self.assertEqual(
            response.status_code,
            201,
            f"Status: {response.status_code}, Content: {getattr(response, 'data', response.content)}",
        )
        self.assertEqual(response.data["email"], "alice@example.com")
        self.assertEqual(response.data["skills"], [{"name": "React", "proficiency": "Pro"}])
        self.assertIsNone(response.data["team_id"])
        self.assertTrue(response.data["avatar"].startswith("https://api.dicebear.com/"))

        response = self.client.get("/api/users/profiles/me/")
        self.assertEqual(response.data["full_name"], "Alice Sharma")

    def test_repeating_setup_keeps_team_membership(self):
        create_profile(self.user.pk, full_name="Alice", bio="first")
        team = create_team(self.user.pk, "Rocket")

        response = self.client.post(
            "/api/users/profiles/",
            {"full_name": "Alice Sharma", "primary_role": "Tester"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["team_id"], team.pk)
        self.assertTrue(response.data["is_team_leader"])

        profile = get_profile(self.user.pk)
        self.assertEqual(profile.full_name, "Alice Sharma")
        self.assertIsNone(profile.bio)
        self.assertEqual(profile.team_id, team.pk)
        self.assertMembershipConsistent()

        mine = self.client.get("/api/teams/mine/")
        self.assertEqual([t["id"] for t in mine.data], [team.pk])

    def test_profile_setup_rejects_unknown_proficiency(self):
        payload = {"full_name": "Alice", "skills": [{"name": "React", "proficiency": "Guru"}]}
        response = self.client.post("/api/users/profiles/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_membership_fields_are_read_only(self):
        create_profile(self.user.pk, full_name="Alice")
        team = create_team(self.other.pk, "Rocket")

        response = self.client.patch(
            f"/api/users/profiles/{self.user.pk}/",
            {"bio": "Updated", "team_id": team.pk, "is_team_leader": True},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        profile = get_profile(self.user.pk)
        self.assertEqual(profile.bio, "Updated")
        self.assertIsNone(profile.team_id)
        self.assertFalse(profile.is_team_leader)

    def test_cannot_edit_someone_else(self):
        response = self.client.patch(f"/api/users/profiles/{self.other.pk}/", {"bio": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        create_profile(self.user.pk, full_name="Alice")
        designer = make_person("dan", Profile.ROLE_DESIGNER)
        create_team(self.other.pk, "Rocket")

        everyone = self.client.get("/api/users/profiles/").data
        self.assertEqual({p["id"] for p in everyone}, {self.other.pk, designer.pk})

        available = self.client.get("/api/users/profiles/", {"available": "1"}).data
        self.assertEqual([p["id"] for p in available], [designer.pk])

        by_role = self.client.get("/api/users/profiles/", {"role": Profile.ROLE_BACKEND}).data
        self.assertEqual(by_role, [])

    def test_roles(self):
        response = self.client.get("/api/users/profiles/roles/")
        self.assertEqual(response.data["in_use"], [Profile.ROLE_BACKEND])
        self.assertEqual(len(response.data["all"]), 9)
