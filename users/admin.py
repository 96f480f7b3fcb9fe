from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import Profile, User


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'first_name', 'last_name', 'is_staff', 'is_active')
    list_filter = ('is_staff', 'is_superuser', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'full_name', 'primary_role', 'college', 'team', 'is_team_leader', 'created_at')
    list_filter = ('primary_role', 'year_of_study', 'is_team_leader')
    search_fields = ('full_name', 'email', 'college')
    raw_id_fields = ('user', 'team')
    # Membership is owned by the team/invitation flow
    readonly_fields = ('team', 'is_team_leader', 'created_at')
