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
            name="FeedPost",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("author_name", models.CharField(blank=True, max_length=255)),
                ("author_avatar", models.URLField(blank=True, max_length=1024, null=True)),
                ("author_role", models.CharField(blank=True, max_length=64, null=True)),
                ("type", models.CharField(choices=[("team_created", "Team Created"), ("member_joined", "Member Joined"), ("looking_for_team", "Looking For Team"), ("open_to_join", "Open To Join"), ("user_post", "User Post")], max_length=32)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("team_name", models.CharField(blank=True, max_length=100)),
                ("roles_needed", models.JSONField(blank=True, default=list)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="feed_posts", to=settings.AUTH_USER_MODEL)),
                ("team", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="feed_posts", to="teams.team")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["-created_at"], name="feedpost_created_idx"),
                    models.Index(fields=["author", "-created_at"], name="feedpost_author_idx"),
                ],
            },
        ),
    ]
