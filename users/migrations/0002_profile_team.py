import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
        ("teams", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="profile",
            name="team",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="member_profiles", to="teams.team"),
        ),
        migrations.AddIndex(
            model_name="profile",
            index=models.Index(fields=["team"], name="profile_team_idx"),
        ),
    ]
