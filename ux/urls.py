from django.urls import path
from ux.views.dashboard import UXDashboardSummaryView
from ux.views.team_recommendations import UXMyTeamRecommendationsView

urlpatterns = [
    path(
        "me/dashboard/summary/",
        UXDashboardSummaryView.as_view(),
        name="ux-dashboard-summary",
    ),
    path(
        "me/team/recommendations/",
        UXMyTeamRecommendationsView.as_view(),
        name="ux-team-recommendations",
    ),
]
