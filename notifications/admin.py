from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "to_user", "type", "from_user_name", "team_name", "read", "created_at")
    list_filter = ("type", "read")
    search_fields = ("message", "team_name", "from_user_name")
    raw_id_fields = ("to_user", "from_user", "team")
