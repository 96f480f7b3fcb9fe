# ux/views/dashboard.py

from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import StoreUnavailable
from ux.services.dashboard import get_dashboard_summary


class UXDashboardSummaryView(APIView):
    """GET /api/ux/me/dashboard/summary/ - team, invitation and notification counters"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        summary = get_dashboard_summary(request.user)
        if summary is None:
            raise StoreUnavailable()

        return Response({
            "meta": {"success": True},
            "data": summary,
        })
