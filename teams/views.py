# teams/views.py - Team Formation API Views

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import Forbidden, StoreUnavailable, TeamNotFound
from users.services import get_profile
from ux.services.team_recommendations import recommend_for_team
from ux.views.team_recommendations import serialize_recommendations
from .membership import (
    get_incoming_invitations,
    get_join_requests,
    get_outgoing_invitations,
    remove_team_member,
    respond_to_invitation,
    send_invitation,
    terminate_team,
)
from .models import Invitation, Team
from .serializers import (
    InvitationSerializer,
    RespondInvitationSerializer,
    RosterEntrySerializer,
    SendInvitationSerializer,
    TeamSerializer,
    WorkspaceLogSerializer,
)
from .services import (
    add_workspace_log,
    create_team,
    get_team,
    get_team_members,
    get_user_teams,
    get_workspace_logs,
    list_available_teams,
    update_team,
)


def _get_team_or_404(team_id):
    team = get_team(team_id)
    if team is None:
        raise TeamNotFound()
    return team


def _require_leader(team, user, message="Only the team leader can do this"):
    if team.leader_id != user.pk:
        raise Forbidden(message)


def _require_member(team, user):
    if not team.roster.filter(user_id=user.pk).exists():
        raise Forbidden("Only team members can access the workspace")


class TeamViewSet(viewsets.GenericViewSet):
    """
    API for creating and running teams.

    Membership changes go through teams.membership; this view only maps
    HTTP onto those operations and checks who is calling.
    """
    serializer_class = TeamSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r'\d+'

    def list(self, request):
        """GET /api/teams/ - forming teams with room left"""
        teams = list_available_teams()
        return Response(self.get_serializer(teams, many=True).data)

    def create(self, request):
        """POST /api/teams/ - caller becomes the leader"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        team = create_team(
            request.user.pk,
            data['name'],
            data.get('description', ''),
            max_members=data.get('max_members'),
            status=data.get('status', Team.STATUS_FORMING),
            roles_needed=data.get('roles_needed'),
            hackathon=data.get('hackathon'),
        )
        if team is None:
            raise StoreUnavailable()

        return Response(self.get_serializer(team).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        team = _get_team_or_404(pk)
        return Response(self.get_serializer(team).data)

    def partial_update(self, request, pk=None):
        """PATCH /api/teams/{id}/ - leader only, descriptive fields only"""
        team = _get_team_or_404(pk)
        _require_leader(team, request.user, "Only team leader can edit the team")

        serializer = self.get_serializer(team, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        update_team(team.pk, **serializer.validated_data)

        return Response(self.get_serializer(get_team(team.pk)).data)

    def destroy(self, request, pk=None):
        """DELETE /api/teams/{id}/ - terminate (leader only)"""
        terminate_team(int(pk), request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        """GET /api/teams/mine/ - [team] or []"""
        teams = get_user_teams(request.user.pk)
        return Response(self.get_serializer(teams, many=True).data)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """GET /api/teams/{id}/members/ - roster joined with profiles"""
        team = _get_team_or_404(pk)
        entries = get_team_members(team.pk)
        return Response(RosterEntrySerializer(entries, many=True).data)

    @action(detail=True, methods=['post'], url_path=r'members/(?P<user_id>\d+)/remove')
    def remove_member(self, request, pk=None, user_id=None):
        """
        POST /api/teams/{id}/members/{user_id}/remove/

        Leader removes a member, or a member removes themself (leave).
        """
        team = _get_team_or_404(pk)
        user_id = int(user_id)

        if request.user.pk not in (team.leader_id, user_id):
            raise Forbidden("Only team leader can remove members")

        removed = remove_team_member(team.pk, user_id)
        return Response({'removed': removed})

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """POST /api/teams/{id}/leave/ (leaders cannot leave)"""
        team = _get_team_or_404(pk)
        removed = remove_team_member(team.pk, request.user.pk)
        if not removed:
            return Response(
                {'error': 'You are not a member of this team'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'], url_path='join-requests')
    def join_requests(self, request, pk=None):
        """GET /api/teams/{id}/join-requests/ - pending, leader only"""
        team = _get_team_or_404(pk)
        _require_leader(team, request.user)
        return Response(InvitationSerializer(get_join_requests(team.pk), many=True).data)

    @action(detail=True, methods=['get'])
    def recommendations(self, request, pk=None):
        """GET /api/teams/{id}/recommendations/ - roles to fill + candidates"""
        team = _get_team_or_404(pk)
        return Response(serialize_recommendations(recommend_for_team(team, exclude_user_id=request.user.pk)))

    @action(detail=True, methods=['get', 'post'])
    def workspace(self, request, pk=None):
        """
        GET  /api/teams/{id}/workspace/ - progress log, newest first
        POST /api/teams/{id}/workspace/ - {"message": "..."}
        """
        team = _get_team_or_404(pk)
        _require_member(team, request.user)

        if request.method == 'GET':
            logs = get_workspace_logs(team.pk)
            return Response(WorkspaceLogSerializer(logs, many=True).data)

        serializer = WorkspaceLogSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        profile = get_profile(request.user.pk)
        entry = add_workspace_log(
            team.pk,
            request.user.pk,
            profile.display_name if profile else request.user.username,
            serializer.validated_data['message'],
        )
        if entry is None:
            raise StoreUnavailable()

        return Response(WorkspaceLogSerializer(entry).data, status=status.HTTP_201_CREATED)


class InvitationViewSet(viewsets.GenericViewSet):
    """
    Invites (leader -> candidate) and join requests (candidate -> leader).

    GET  /api/invitations/                 {"incoming": [...], "outgoing": [...]}
    POST /api/invitations/                 send
    POST /api/invitations/{id}/respond/    {"status": "accepted"|"rejected"}
    """
    serializer_class = InvitationSerializer
    permission_classes = [IsAuthenticated]
    throttle_scope = 'invitations'
    lookup_value_regex = r'\d+'

    def list(self, request):
        return Response({
            'incoming': InvitationSerializer(get_incoming_invitations(request.user.pk), many=True).data,
            'outgoing': InvitationSerializer(get_outgoing_invitations(request.user.pk), many=True).data,
        })

    def create(self, request):
        serializer = SendInvitationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        team = _get_team_or_404(data['team_id'])

        if data['type'] == Invitation.TYPE_INVITE:
            _require_leader(team, request.user, "Only team leader can send invitations")
            to_user_id = data['to_user_id']
        else:
            to_user_id = team.leader_id

        invitation = send_invitation(
            request.user.pk,
            to_user_id,
            team.pk,
            data['type'],
            data.get('message') or None,
        )
        if invitation is None:
            raise StoreUnavailable()

        return Response(InvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def respond(self, request, pk=None):
        serializer = RespondInvitationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invitation = respond_to_invitation(
            int(pk),
            serializer.validated_data['status'],
            responder_id=request.user.pk,
            role=serializer.validated_data.get('role') or None,
        )
        if invitation is None:
            raise StoreUnavailable()

        return Response(InvitationSerializer(invitation).data)
