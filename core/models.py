#  core/models.py
from django.db import models
from django.conf import settings


class FeedPost(models.Model):
    """
    Append-only activity timeline.

    Team lifecycle posts (team created, member joined) are written by the
    membership protocol; users can also publish their own posts. Author
    and team details are snapshotted at write time.
    """
    TYPE_TEAM_CREATED = "team_created"
    TYPE_MEMBER_JOINED = "member_joined"
    TYPE_LOOKING_FOR_TEAM = "looking_for_team"
    TYPE_OPEN_TO_JOIN = "open_to_join"
    TYPE_USER_POST = "user_post"

    TYPE_CHOICES = [
        (TYPE_TEAM_CREATED, "Team Created"),
        (TYPE_MEMBER_JOINED, "Member Joined"),
        (TYPE_LOOKING_FOR_TEAM, "Looking For Team"),
        (TYPE_OPEN_TO_JOIN, "Open To Join"),
        (TYPE_USER_POST, "User Post"),
    ]

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="feed_posts",
    )
    author_name = models.CharField(max_length=255, blank=True)
    author_avatar = models.URLField(max_length=1024, blank=True, null=True)
    author_role = models.CharField(max_length=64, blank=True, null=True)

    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    team = models.ForeignKey(
        "teams.Team",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="feed_posts",
    )
    team_name = models.CharField(max_length=100, blank=True)
    roles_needed = models.JSONField(default=list, blank=True)
    skills = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["-created_at"], name="feedpost_created_idx"),
            models.Index(fields=["author", "-created_at"], name="feedpost_author_idx"),
        ]

    def __str__(self):
        return f"{self.type} - {self.title}"
