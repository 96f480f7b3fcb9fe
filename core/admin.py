from django.contrib import admin
from .models import FeedPost


@admin.register(FeedPost)
class FeedPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'author_name', 'team_name', 'created_at')
    list_filter = ('type', 'created_at')
    search_fields = ('title', 'description', 'author_name', 'team_name')
    raw_id_fields = ('author', 'team')
