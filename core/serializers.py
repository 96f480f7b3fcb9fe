from rest_framework import serializers

from .models import FeedPost


class FeedPostSerializer(serializers.ModelSerializer):
    author_id = serializers.IntegerField(read_only=True)
    team_id = serializers.IntegerField(read_only=True, allow_null=True)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=32),
        required=False,
    )

    class Meta:
        model = FeedPost
        fields = [
            'id',
            'type',
            'author_id',
            'author_name',
            'author_avatar',
            'author_role',
            'title',
            'description',
            'team_id',
            'team_name',
            'roles_needed',
            'skills',
            'tags',
            'created_at',
        ]
        read_only_fields = [
            'id', 'type', 'author_name', 'author_avatar', 'author_role',
            'team_name', 'roles_needed', 'skills', 'created_at',
        ]

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title is required")
        return value
