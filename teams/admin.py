from django.contrib import admin

from .models import Invitation, Team, TeamMember, WorkspaceLog


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    raw_id_fields = ("user",)
    readonly_fields = ("joined_at",)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "leader", "status", "max_members", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "description", "hackathon", "leader_name")
    raw_id_fields = ("leader",)
    inlines = [TeamMemberInline]


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "team_name", "from_user", "to_user", "status", "created_at", "responded_at")
    list_filter = ("type", "status")
    search_fields = ("team_name", "from_user_name", "to_user_name")
    raw_id_fields = ("team", "from_user", "to_user", "joining_user")
    # Status only moves through the respond flow
    readonly_fields = ("status", "responded_at")


@admin.register(WorkspaceLog)
class WorkspaceLogAdmin(admin.ModelAdmin):
    list_display = ("id", "team", "user_name", "created_at")
    search_fields = ("message", "user_name")
    raw_id_fields = ("team", "user")
