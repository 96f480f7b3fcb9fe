from rest_framework import serializers

from .models import Profile, User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'date_joined']


class SkillSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=64)
    proficiency = serializers.ChoiceField(choices=Profile.PROFICIENCY_LEVELS)


class ProfileSerializer(serializers.ModelSerializer):
    """
    Public profile. Membership fields are read-only here; they only change
    through team creation, invitations and roster operations.
    """
    id = serializers.IntegerField(source='pk', read_only=True)
    skills = SkillSerializer(many=True, required=False)
    team_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Profile
        fields = [
            'id',
            'email',
            'full_name',
            'college',
            'year_of_study',
            'primary_role',
            'skills',
            'bio',
            'avatar',
            'team_id',
            'is_team_leader',
            'created_at',
        ]
        read_only_fields = ['is_team_leader', 'created_at']


class ProfileCardSerializer(serializers.ModelSerializer):
    """Compact profile used inside rosters and recommendations."""
    id = serializers.IntegerField(source='pk', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'full_name', 'primary_role', 'skills', 'avatar', 'college']
