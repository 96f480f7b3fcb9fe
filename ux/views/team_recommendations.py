# ux/views/team_recommendations.py

from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import NotFound
from teams.services import get_user_teams
from users.serializers import ProfileCardSerializer
from ux.services.team_recommendations import recommend_for_team


def serialize_recommendations(result):
    return {
        "missing_roles": result["missing_roles"],
        "recommended_users": [
            {
                "user": ProfileCardSerializer(item["user"]).data,
                "reason": item["reason"],
            }
            for item in result["recommended_users"]
        ],
        "explanation": result["explanation"],
    }


class UXMyTeamRecommendationsView(APIView):
    """GET /api/ux/me/team/recommendations/ - advice for the caller's own team"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        teams = get_user_teams(request.user.pk)
        if not teams:
            raise NotFound("You are not in a team")

        result = recommend_for_team(teams[0], exclude_user_id=request.user.pk)

        return Response({
            "meta": {"success": True},
            "data": serialize_recommendations(result),
        })
