import time

from django.conf import settings
from django.db import OperationalError, connections
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import Forbidden, NotFound, StoreUnavailable
from .models import FeedPost
from .serializers import FeedPostSerializer
from .services import FeedService


# -----------------------------
# FEED
# -----------------------------
class FeedListView(APIView):
    """
    GET  /api/feed/         latest posts, newest first
    POST /api/feed/         {"title", "description", "tags"} -> user post
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        limit = request.query_params.get("limit")
        posts = FeedService.get_feed_posts(limit=int(limit) if limit and limit.isdigit() else None)
        return Response(FeedPostSerializer(posts, many=True).data)

    def post(self, request):
        serializer = FeedPostSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        post = FeedService.create_user_post(
            request.user,
            data["title"],
            data.get("description", ""),
            tags=data.get("tags"),
        )
        if post is None:
            raise StoreUnavailable()

        return Response(FeedPostSerializer(post).data, status=status.HTTP_201_CREATED)


class FeedPostDetailView(APIView):
    """
    PATCH  /api/feed/<post_id>/   author only
    DELETE /api/feed/<post_id>/   author only
    """
    permission_classes = [IsAuthenticated]

    def _get_own_post(self, request, post_id):
        post = FeedPost.objects.filter(pk=post_id).first()
        if post is None:
            raise NotFound("Post not found.")
        if post.author_id != request.user.pk:
            raise Forbidden("You can only edit your own posts")
        return post

    def patch(self, request, post_id):
        post = self._get_own_post(request, post_id)

        serializer = FeedPostSerializer(post, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        FeedService.update_post(
            post.pk,
            data.get("title", post.title),
            data.get("description", post.description),
            tags=data.get("tags", post.tags),
        )
        post.refresh_from_db()
        return Response(FeedPostSerializer(post).data)

    def delete(self, request, post_id):
        post = self._get_own_post(request, post_id)
        FeedService.delete_post(post.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserFeedView(APIView):
    """GET /api/feed/user/<user_id>/ - one author's posts"""
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id):
        posts = FeedService.get_user_posts(user_id)
        return Response(FeedPostSerializer(posts, many=True).data)


# -----------------------------
# HEALTH
# -----------------------------
class HealthCheckView(APIView):
    """
    Lightweight health endpoint for uptime checks.
    - Checks DB connectivity
    - Returns env and simple latency
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint

    def get(self, request, *args, **kwargs):
        start = time.time()

        db_ok = True
        try:
            connections["default"].cursor()
        except OperationalError:
            db_ok = False

        duration_ms = int((time.time() - start) * 1000)

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": duration_ms,
            }
        )
