# teams/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import InvitationViewSet, TeamViewSet

router = DefaultRouter()
router.register(r'teams', TeamViewSet, basename='team')
router.register(r'invitations', InvitationViewSet, basename='invitation')

urlpatterns = [
    path('', include(router.urls)),
]
