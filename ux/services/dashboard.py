# ux/services/dashboard.py

from core.models import FeedPost
from core.store import store_guard
from notifications.models import Notification
from teams.models import Invitation, TeamMember
from users.models import Profile


@store_guard(default=None)
def get_dashboard_summary(user):
    profile = Profile.objects.select_related("team").filter(pk=user.pk).first()
    team = profile.team if profile is not None else None

    # 1️⃣ Team
    team_stats = None
    if team is not None:
        team_stats = {
            "id": team.id,
            "name": team.name,
            "status": team.status,
            "members": TeamMember.objects.filter(team=team).count(),
            "max_members": team.max_members,
            "is_leader": team.leader_id == user.pk,
        }

    # 2️⃣ Invitations
    pending_invitations = Invitation.objects.filter(
        to_user=user,
        status=Invitation.STATUS_PENDING,
    ).count()

    sent_pending = Invitation.objects.filter(
        from_user=user,
        status=Invitation.STATUS_PENDING,
    ).count()

    # 3️⃣ Notifications
    unread_notifications = Notification.objects.filter(
        to_user=user,
        read=False,
    ).count()

    # 4️⃣ Posts
    posts = FeedPost.objects.filter(author=user).count()

    return {
        "has_profile": profile is not None,
        "team": team_stats,
        "pending_invitations": pending_invitations,
        "sent_pending_invitations": sent_pending,
        "unread_notifications": unread_notifications,
        "posts": posts,
    }
