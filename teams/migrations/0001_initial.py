import django.db.models.deletion
import teams.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                ("hackathon", models.CharField(blank=True, max_length=255, null=True)),
                ("leader_name", models.CharField(blank=True, max_length=255)),
                ("max_members", models.PositiveSmallIntegerField(default=teams.models.default_max_members)),
                ("status", models.CharField(choices=[("forming", "Forming"), ("active", "Active"), ("complete", "Complete")], default="forming", max_length=16)),
                ("roles_needed", models.JSONField(blank=True, default=list, help_text="Roles the team is looking for")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("leader", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="led_teams", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["status", "-created_at"], name="team_status_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="TeamMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(max_length=64)),
                ("user_name", models.CharField(blank=True, max_length=255)),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("team", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="roster", to="teams.team")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="team_memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["joined_at", "id"],
                "indexes": [models.Index(fields=["team", "joined_at"], name="teammember_team_joined_idx")],
                "constraints": [models.UniqueConstraint(fields=("user",), name="teammember_one_team_per_user")],
            },
        ),
        migrations.CreateModel(
            name="Invitation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("team_name", models.CharField(blank=True, max_length=100)),
                ("from_user_name", models.CharField(blank=True, max_length=255)),
                ("to_user_name", models.CharField(blank=True, max_length=255)),
                ("type", models.CharField(choices=[("invite", "Invite"), ("join_request", "Join Request")], max_length=16)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("accepted", "Accepted"), ("rejected", "Rejected")], default="pending", max_length=16)),
                ("message", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                ("from_user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sent_invitations", to=settings.AUTH_USER_MODEL)),
                ("joining_user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("team", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="invitations", to="teams.team")),
                ("to_user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="received_invitations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["to_user", "status"], name="invitation_to_status_idx"),
                    models.Index(fields=["team", "type", "status"], name="invitation_team_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(status="pending"), fields=("from_user", "team"), name="invitation_one_pending_per_sender_team"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WorkspaceLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_name", models.CharField(blank=True, max_length=255)),
                ("message", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("team", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="workspace_logs", to="teams.team")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="workspace_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["team", "-created_at"], name="workspacelog_team_idx")],
            },
        ),
    ]
