# users/models.py
from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Authentication identity. The primary key is the stable `uid` used by
    every other collection; the public profile lives in `Profile`.
    """
    email = models.EmailField(unique=True)

    def __str__(self):
        return self.email or self.username


class Profile(models.Model):
    """
    Per-user profile and the single source of truth for team membership.

    `team` is null or points at the one team the user belongs to;
    `is_team_leader` is only true while the user leads that team.
    """
    ROLE_FRONTEND = "Frontend Developer"
    ROLE_BACKEND = "Backend Developer"
    ROLE_DESIGNER = "UI/UX Designer"
    ROLE_TESTER = "Tester"
    ROLE_FULL_STACK = "Full Stack Developer"
    ROLE_ML = "ML Engineer"
    ROLE_MOBILE = "Mobile Developer"
    ROLE_DEVOPS = "DevOps Engineer"
    ROLE_PRODUCT = "Product Manager"

    ROLE_CHOICES = [
        (ROLE_FRONTEND, "Frontend Developer"),
        (ROLE_BACKEND, "Backend Developer"),
        (ROLE_DESIGNER, "UI/UX Designer"),
        (ROLE_TESTER, "Tester"),
        (ROLE_FULL_STACK, "Full Stack Developer"),
        (ROLE_ML, "ML Engineer"),
        (ROLE_MOBILE, "Mobile Developer"),
        (ROLE_DEVOPS, "DevOps Engineer"),
        (ROLE_PRODUCT, "Product Manager"),
    ]

    YEAR_CHOICES = [
        ("First Year", "First Year"),
        ("Second Year", "Second Year"),
        ("Third Year", "Third Year"),
        ("Fourth Year", "Fourth Year"),
    ]

    PROFICIENCY_LEVELS = ("Beginner", "Intermediate", "Pro")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="profile",
    )
    email = models.EmailField(blank=True)
    full_name = models.CharField(max_length=255, blank=True)
    college = models.CharField(max_length=255, blank=True, null=True)
    year_of_study = models.CharField(max_length=20, choices=YEAR_CHOICES, blank=True, null=True)
    primary_role = models.CharField(max_length=64, choices=ROLE_CHOICES, blank=True)

    # Ordered list of {"name": ..., "proficiency": Beginner|Intermediate|Pro}
    skills = models.JSONField(default=list, blank=True)
    bio = models.TextField(blank=True, null=True)
    avatar = models.URLField(max_length=1024, blank=True, null=True)

    # Membership (maintained by teams.membership only)
    team = models.ForeignKey(
        "teams.Team",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="member_profiles",
    )
    is_team_leader = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(fields=["team"], name="profile_team_idx"),
            models.Index(fields=["primary_role"], name="profile_role_idx"),
        ]

    def __str__(self):
        return self.full_name or self.email or str(self.pk)

    @property
    def display_name(self):
        return self.full_name or "User"
