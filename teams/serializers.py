# teams/serializers.py

from rest_framework import serializers

from users.serializers import ProfileCardSerializer
from .models import Invitation, Team, TeamMember, WorkspaceLog


class TeamMemberSerializer(serializers.ModelSerializer):
    """Roster entry"""

    class Meta:
        model = TeamMember
        fields = ['user_id', 'role', 'user_name', 'joined_at']
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    members = TeamMemberSerializer(source='roster', many=True, read_only=True)
    leader_id = serializers.IntegerField(read_only=True)
    current_size = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    max_members = serializers.IntegerField(min_value=1, max_value=20, required=False)
    roles_needed = serializers.ListField(
        child=serializers.CharField(max_length=64),
        required=False,
    )

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'description', 'hackathon',
            'leader_id', 'leader_name', 'max_members', 'current_size', 'is_full',
            'status', 'roles_needed', 'members', 'created_at',
        ]
        read_only_fields = ['id', 'leader_name', 'created_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Team name is required")
        return value

    def validate_max_members(self, value):
        team = self.instance
        if team is not None and value < team.current_size:
            raise serializers.ValidationError(
                f"Team already has {team.current_size} members"
            )
        return value


class RosterEntrySerializer(serializers.Serializer):
    """Entries returned by teams.services.get_team_members"""
    id = serializers.CharField()
    team_id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    role = serializers.CharField()
    user_name = serializers.CharField()
    joined_at = serializers.DateTimeField()
    profile = ProfileCardSerializer(allow_null=True)


class InvitationSerializer(serializers.ModelSerializer):
    team_id = serializers.IntegerField(read_only=True)
    from_user_id = serializers.IntegerField(read_only=True)
    to_user_id = serializers.IntegerField(read_only=True)
    joining_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Invitation
        fields = [
            'id', 'team_id', 'team_name',
            'from_user_id', 'from_user_name', 'to_user_id', 'to_user_name',
            'joining_user_id', 'type', 'status', 'message',
            'created_at', 'responded_at',
        ]
        read_only_fields = fields


class SendInvitationSerializer(serializers.Serializer):
    """
    invite:       leader -> candidate, `to_user_id` required
    join_request: candidate -> the team's leader, `to_user_id` ignored
    """
    team_id = serializers.IntegerField()
    type = serializers.ChoiceField(choices=Invitation.TYPE_CHOICES)
    to_user_id = serializers.IntegerField(required=False)
    message = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs):
        if attrs['type'] == Invitation.TYPE_INVITE and not attrs.get('to_user_id'):
            raise serializers.ValidationError({'to_user_id': "Required for an invite"})
        return attrs


class RespondInvitationSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        (Invitation.STATUS_ACCEPTED, "Accepted"),
        (Invitation.STATUS_REJECTED, "Rejected"),
    ])
    role = serializers.CharField(required=False, allow_blank=True, max_length=64)


class WorkspaceLogSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = WorkspaceLog
        fields = ['id', 'user_id', 'user_name', 'message', 'created_at']
        read_only_fields = ['id', 'user_id', 'user_name', 'created_at']
