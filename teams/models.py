from django.conf import settings
from django.db import models
from django.db.models import Q


def default_max_members():
    return settings.TEAM_DEFAULT_MAX_MEMBERS


class Team(models.Model):
    """
    Team Formation: a roster with a leader, a capacity and open roles.

    The roster lives in `TeamMember` rows (one per user) instead of an array
    field, so adding or removing one member never rewrites the others.

    Invariants kept by teams.membership:
    - roster size <= max_members
    - the leader is always on the roster
    """
    STATUS_FORMING = "forming"
    STATUS_ACTIVE = "active"
    STATUS_COMPLETE = "complete"

    STATUS_CHOICES = [
        (STATUS_FORMING, "Forming"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETE, "Complete"),
    ]

    LEADER_ROLE = "Team Leader"

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    hackathon = models.CharField(max_length=255, blank=True, null=True)

    # Immutable after creation
    leader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="led_teams",
    )
    leader_name = models.CharField(max_length=255, blank=True)

    max_members = models.PositiveSmallIntegerField(default=default_max_members)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_FORMING)
    roles_needed = models.JSONField(default=list, blank=True, help_text="Roles the team is looking for")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "-created_at"], name="team_status_created_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def members(self):
        """Ordered roster as plain dicts: {user_id, role, user_name}."""
        return [
            {"user_id": m.user_id, "role": m.role, "user_name": m.user_name}
            for m in self.roster.all()
        ]

    @property
    def current_size(self):
        return self.roster.count()

    @property
    def is_full(self):
        return self.current_size >= self.max_members


class TeamMember(models.Model):
    """
    One roster entry. The unique constraint on `user` means the store itself
    refuses a second team for the same user.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="roster")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="team_memberships")
    role = models.CharField(max_length=64)
    user_name = models.CharField(max_length=255, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["user"], name="teammember_one_team_per_user"),
        ]
        indexes = [
            models.Index(fields=["team", "joined_at"], name="teammember_team_joined_idx"),
        ]

    def __str__(self):
        return f"{self.user_name or self.user_id} in {self.team_id}"


class Invitation(models.Model):
    """
    A directional request to join a team.

    - invite: the leader (from_user) asks a candidate (to_user) to join
    - join_request: a candidate (from_user) asks the leader (to_user)

    `joining_user` is stored explicitly at creation so callers never have to
    derive it from `type`. `status` moves once, pending -> accepted|rejected.
    """
    TYPE_INVITE = "invite"
    TYPE_JOIN_REQUEST = "join_request"

    TYPE_CHOICES = [
        (TYPE_INVITE, "Invite"),
        (TYPE_JOIN_REQUEST, "Join Request"),
    ]

    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="invitations")
    team_name = models.CharField(max_length=100, blank=True)

    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_invitations",
    )
    from_user_name = models.CharField(max_length=255, blank=True)
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_invitations",
    )
    to_user_name = models.CharField(max_length=255, blank=True)
    joining_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
    )

    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    message = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["from_user", "team"],
                condition=Q(status="pending"),
                name="invitation_one_pending_per_sender_team",
            ),
        ]
        indexes = [
            models.Index(fields=["to_user", "status"], name="invitation_to_status_idx"),
            models.Index(fields=["team", "type", "status"], name="invitation_team_type_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.from_user_id} -> {self.to_user_id} ({self.status})"

    @staticmethod
    def joining_party(type, from_user_id, to_user_id):
        """The user who gains the team if an invitation of `type` is accepted."""
        if type == Invitation.TYPE_JOIN_REQUEST:
            return from_user_id
        return to_user_id

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    @property
    def is_join_request(self):
        return self.type == self.TYPE_JOIN_REQUEST


class WorkspaceLog(models.Model):
    """Free-form progress entries members post in their team workspace."""
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="workspace_logs")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="workspace_logs")
    user_name = models.CharField(max_length=255, blank=True)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["team", "-created_at"], name="workspacelog_team_idx"),
        ]

    def __str__(self):
        return f"{self.user_name}: {self.message[:40]}"
