from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    from_user_id = serializers.IntegerField(read_only=True, allow_null=True)
    team_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "type",
            "from_user_id",
            "from_user_name",
            "team_id",
            "team_name",
            "message",
            "read",
            "created_at",
        ]
        read_only_fields = fields


class MarkReadSerializer(serializers.Serializer):
    # omitted or empty: mark everything read
    ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=True)
