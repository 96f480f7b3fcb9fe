import logging

from django.db import transaction
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from users.serializers import ProfileSerializer
from users.services import default_avatar_url, get_profile, write_profile
from .errors import TooManyAttempts
from .serializers import LoginSerializer, RegisterSerializer

logger = logging.getLogger("teamup.auth")


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }


class ThrottledAuthView(APIView):
    # allow unauthenticated
    permission_classes = []
    authentication_classes = []

    def throttled(self, request, wait):
        raise TooManyAttempts(wait)


class RegisterView(ThrottledAuthView):
    """
    POST /api/auth/register/
    Body: {"email", "password", "full_name"}

    Creates the account and its initial profile (name + generated avatar);
    the rest of the profile is filled in by profile setup.
    """
    throttle_scope = "auth-register"

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        full_name = serializer.validated_data.get("full_name", "")
        with transaction.atomic():
            user = serializer.save()
            write_profile(
                user.pk,
                email=user.email,
                full_name=full_name,
                avatar=default_avatar_url(full_name),
            )

        logger.info(f"Registered user {user.pk} ({user.email})")
        return Response(
            {"id": user.pk, "email": user.email, **_tokens_for(user)},
            status=status.HTTP_201_CREATED
        )


class LoginView(ThrottledAuthView):
    """POST /api/auth/login/ -> SimpleJWT access/refresh pair"""
    throttle_scope = "auth-login"

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']
        return Response(_tokens_for(user), status=status.HTTP_200_OK)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        profile = get_profile(user.pk)
        return Response({
            "id": user.id,
            "email": user.email,
            "username": user.username,
            "profile": ProfileSerializer(profile).data if profile else None,
        })
