import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("teams", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_user_name", models.CharField(blank=True, max_length=255)),
                ("type", models.CharField(choices=[("INVITE", "Invite"), ("ACCEPTED", "Accepted"), ("REJECTED", "Rejected"), ("TEAM_UPDATE", "Team Update"), ("JOIN_REQUEST", "Join Request")], max_length=32)),
                ("team_name", models.CharField(blank=True, max_length=100)),
                ("message", models.TextField(blank=True, null=True)),
                ("read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("from_user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="sent_notifications", to=settings.AUTH_USER_MODEL)),
                ("team", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="notifications", to="teams.team")),
                ("to_user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["to_user", "read"], name="notif_user_read_idx"),
                    models.Index(fields=["type"], name="notif_type_idx"),
                ],
            },
        ),
    ]
