# core/supabase_auth.py
# DRF authentication for JWTs issued by the hosted identity provider (Supabase)

import logging
import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from users.services import create_profile, default_avatar_url, get_profile

logger = logging.getLogger("teamup.auth")

User = get_user_model()


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Validates Supabase HS256 JWTs and maps them to a local user.

    A first-time user gets a local User row and an empty Profile (no team),
    so the membership flow can reference them straight away.
    Tokens this class cannot verify are left to the next authenticator
    (SimpleJWT), except expired ones which fail immediately.
    """

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None

        secret = getattr(settings, "SUPABASE_JWT_SECRET", None)
        if not secret:
            return None

        token = auth_header.split(" ")[1]

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Not a Supabase token: {e}")
            return None

        if not payload.get("sub"):
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = self._get_or_create_user(payload)
        return (user, payload)

    def authenticate_header(self, request):
        # Makes unauthenticated requests 401 instead of 403
        return 'Bearer realm="api"'

    def _get_or_create_user(self, payload: dict):
        email = payload.get("email")
        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            username = self._unique_username(email.split("@")[0])
            user = User.objects.create(username=username, email=email)
            logger.info(f"Created user {user.pk} from Supabase token ({email})")

        if get_profile(user.pk) is None:
            metadata = payload.get("user_metadata") or {}
            full_name = metadata.get("full_name") or metadata.get("name") or ""
            create_profile(
                user.pk,
                email=email,
                full_name=full_name,
                avatar=metadata.get("avatar_url") or default_avatar_url(full_name),
            )

        return user

    @staticmethod
    def _unique_username(base):
        username = base
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base}_{counter}"
            counter += 1
        return username
