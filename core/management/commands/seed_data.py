from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

from core.exceptions import TeamFormationError
from core.services import FeedService
from teams.membership import send_invitation
from teams.models import Invitation
from teams.services import create_team, get_user_teams
from users.models import Profile
from users.services import create_profile, default_avatar_url, get_profile

User = get_user_model()

DEMO_PEOPLE = [
    {
        "username": "alice",
        "full_name": "Alice Sharma",
        "primary_role": Profile.ROLE_FRONTEND,
        "college": "City Institute of Technology",
        "year_of_study": "Third Year",
        "skills": [
            {"name": "React", "proficiency": "Pro"},
            {"name": "TypeScript", "proficiency": "Intermediate"},
        ],
    },
    {
        "username": "bob",
        "full_name": "Bob Mathew",
        "primary_role": Profile.ROLE_BACKEND,
        "college": "City Institute of Technology",
        "year_of_study": "Second Year",
        "skills": [
            {"name": "Django", "proficiency": "Intermediate"},
            {"name": "PostgreSQL", "proficiency": "Intermediate"},
        ],
    },
    {
        "username": "carol",
        "full_name": "Carol Dsouza",
        "primary_role": Profile.ROLE_DESIGNER,
        "college": "National Design School",
        "year_of_study": "Fourth Year",
        "skills": [
            {"name": "Figma", "proficiency": "Pro"},
        ],
    },
    {
        "username": "dave",
        "full_name": "Dave Iyer",
        "primary_role": Profile.ROLE_ML,
        "college": "City Institute of Technology",
        "year_of_study": "Third Year",
        "skills": [
            {"name": "PyTorch", "proficiency": "Intermediate"},
            {"name": "Python", "proficiency": "Pro"},
        ],
    },
]


class Command(BaseCommand):
    help = "Seeds the database with demo profiles, a forming team, invitations and feed posts"

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password", help="Password for every demo user")

    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding data...")

        # 1. Users + profiles
        people = {}
        for data in DEMO_PEOPLE:
            data = dict(data)
            username = data.pop("username")
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@example.com"},
            )
            if created:
                user.set_password(options["password"])
                user.save()

            if get_profile(user.pk) is None:
                create_profile(
                    user.pk,
                    email=user.email,
                    avatar=default_avatar_url(data["full_name"]),
                    **data,
                )
            people[username] = user

        self.stdout.write(f"Profiles ready: {', '.join(people)}")

        alice, bob, carol, dave = (people[n] for n in ("alice", "bob", "carol", "dave"))

        # 2. Team led by alice
        teams = get_user_teams(alice.pk)
        if teams:
            team = teams[0]
        else:
            team = create_team(
                alice.pk,
                "Pixel Pioneers",
                "Building an AI study planner app with a great user experience.",
                max_members=4,
                roles_needed=[Profile.ROLE_BACKEND, Profile.ROLE_DESIGNER],
                hackathon="Smart India Hackathon",
            )
        self.stdout.write(f"Team: {team.name} (#{team.pk})")

        # 3. Invite bob, carol asks to join
        for args in (
            (alice.pk, bob.pk, team.pk, Invitation.TYPE_INVITE, "We need a backend dev!"),
            (carol.pk, alice.pk, team.pk, Invitation.TYPE_JOIN_REQUEST, "I'd love to design your UI."),
        ):
            try:
                send_invitation(*args)
            except TeamFormationError as e:
                self.stdout.write(self.style.WARNING(f"Skipped invitation: {e.detail}"))

        # 4. A free-standing post
        if not FeedService.get_user_posts(dave.pk):
            FeedService.create_user_post(
                dave,
                "Looking for a team!",
                "ML engineer with PyTorch experience, open to any hackathon.",
                tags=["ml", "looking-for-team"],
            )

        self.stdout.write(self.style.SUCCESS("✅ Done."))
