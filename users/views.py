# users/views.py - Profile API

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import Forbidden, ProfileNotFound
from .models import Profile
from .serializers import ProfileSerializer
from .services import (
    create_profile,
    default_avatar_url,
    get_all_users,
    get_available_roles,
    get_available_users,
    get_available_users_by_role,
    get_profile,
    update_profile,
)


class ProfileViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Discover people and manage your own profile.

    GET    /api/users/profiles/                 everyone (newest first)
    GET    /api/users/profiles/?available=1     people without a team
    GET    /api/users/profiles/?role=Tester     available people with that role
    POST   /api/users/profiles/                 profile setup for the caller
    GET    /api/users/profiles/{id}/
    PATCH  /api/users/profiles/{id}/            own profile only
    GET    /api/users/profiles/me/
    GET    /api/users/profiles/roles/
    """
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]
    queryset = Profile.objects.all()
    lookup_value_regex = r'\d+'

    def list(self, request):
        me = request.user.pk
        role = request.query_params.get('role')

        if role:
            profiles = get_available_users_by_role(role, exclude_user_id=me)
        elif request.query_params.get('available') in ('1', 'true'):
            profiles = get_available_users(exclude_user_id=me)
        else:
            profiles = get_all_users(exclude_user_id=me)

        return Response(self.get_serializer(profiles, many=True).data)

    def retrieve(self, request, pk=None):
        profile = get_profile(pk)
        if profile is None:
            raise ProfileNotFound()
        return Response(self.get_serializer(profile).data)

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        fields = dict(serializer.validated_data)
        fields.setdefault('email', request.user.email)
        if not fields.get('avatar'):
            fields['avatar'] = default_avatar_url(fields.get('full_name'))

        profile = create_profile(request.user.pk, **fields)
        return Response(self.get_serializer(profile).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        if str(pk) != str(request.user.pk):
            raise Forbidden("You can only edit your own profile")

        profile = get_profile(request.user.pk)
        if profile is None:
            raise ProfileNotFound()

        serializer = self.get_serializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        update_profile(request.user.pk, **serializer.validated_data)

        return Response(self.get_serializer(get_profile(request.user.pk)).data)

    @action(detail=False, methods=['get'])
    def me(self, request):
        """GET /api/users/profiles/me/ - 404 until profile setup is done"""
        profile = get_profile(request.user.pk)
        if profile is None:
            raise ProfileNotFound("Profile not set up yet")
        return Response(self.get_serializer(profile).data)

    @action(detail=False, methods=['get'])
    def roles(self, request):
        """GET /api/users/profiles/roles/ - roles in use plus the full catalogue"""
        return Response({
            'in_use': get_available_roles(),
            'all': [value for value, _ in Profile.ROLE_CHOICES],
        })
