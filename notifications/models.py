# notifications/models.py
from django.db import models
from django.conf import settings


class Notification(models.Model):
    TYPE_INVITE = "INVITE"
    TYPE_ACCEPTED = "ACCEPTED"
    TYPE_REJECTED = "REJECTED"
    TYPE_TEAM_UPDATE = "TEAM_UPDATE"
    TYPE_JOIN_REQUEST = "JOIN_REQUEST"

    TYPE_CHOICES = [
        (TYPE_INVITE, "Invite"),
        (TYPE_ACCEPTED, "Accepted"),
        (TYPE_REJECTED, "Rejected"),
        (TYPE_TEAM_UPDATE, "Team Update"),
        (TYPE_JOIN_REQUEST, "Join Request"),
    ]

    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_notifications",
    )
    from_user_name = models.CharField(max_length=255, blank=True)
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)

    # Team context survives team termination as a name only
    team = models.ForeignKey(
        "teams.Team",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    team_name = models.CharField(max_length=100, blank=True)
    message = models.TextField(blank=True, null=True)

    # Monotonic: false -> true only
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["to_user", "read"], name="notif_user_read_idx"),
            models.Index(fields=["type"], name="notif_type_idx"),
        ]

    def __str__(self):
        return f"{self.to_user_id} - {self.type} - {self.team_name}"
