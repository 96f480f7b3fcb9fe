import logging

from django.conf import settings

from core.realtime import hub
from core.store import store_guard
from .models import FeedPost

logger = logging.getLogger("teamup.feed")


class FeedService:
    """
    Append-only activity timeline. Nothing here is load-bearing for
    membership correctness; posts only snapshot what happened.
    """

    @staticmethod
    def write_post(author_id, type, title, description="", *, team=None, profile=None,
                   author_name=None, team_name="", roles_needed=None, skills=None, tags=None):
        """
        Append a post. `profile` (the author's, when known) fills in the
        author snapshot fields.

        Not store-guarded: membership operations call this inside their
        transaction and a store error has to abort the whole unit.
        """
        post = FeedPost.objects.create(
            author_id=author_id,
            author_name=author_name or (profile.display_name if profile else "User"),
            author_avatar=profile.avatar if profile else None,
            author_role=profile.primary_role if profile else None,
            type=type,
            title=title,
            description=description or "",
            team=team,
            team_name=team.name if team is not None else team_name,
            roles_needed=roles_needed or [],
            skills=skills or [],
            tags=tags or [],
        )
        logger.info(f"Feed post {type} created by user {post.author_id}")
        return post

    @staticmethod
    @store_guard(default=None)
    def create_feed_post(author_id, type, title, description="", **kwargs):
        return FeedService.write_post(author_id, type, title, description, **kwargs)

    @staticmethod
    @store_guard(default=None)
    def create_user_post(user, title, description, tags=None):
        profile = getattr(user, "profile", None)
        return FeedService.create_feed_post(
            author_id=user.pk,
            type=FeedPost.TYPE_USER_POST,
            title=title,
            description=description,
            profile=profile,
            tags=tags or [],
        )

    @staticmethod
    @store_guard(default=0)
    def update_post(post_id, title, description, tags=None):
        post = FeedPost.objects.filter(pk=post_id).first()
        if post is None:
            return 0
        post.title = title
        post.description = description
        post.tags = tags or []
        post.save(update_fields=["title", "description", "tags"])
        return 1

    @staticmethod
    @store_guard(default=0)
    def delete_post(post_id):
        post = FeedPost.objects.filter(pk=post_id).first()
        if post is None:
            return 0
        post.delete()
        logger.info(f"Feed post {post_id} deleted")
        return 1

    @staticmethod
    def _user_posts(user_id):
        return FeedPost.objects.filter(author_id=user_id).order_by("-created_at", "-id")

    @staticmethod
    def _recent_posts(limit):
        return FeedPost.objects.order_by("-created_at", "-id")[:limit]

    @staticmethod
    @store_guard(default=list)
    def get_user_posts(user_id):
        return list(FeedService._user_posts(user_id))

    @staticmethod
    @store_guard(default=list)
    def get_feed_posts(limit=None):
        return list(FeedService._recent_posts(limit or settings.FEED_PAGE_SIZE))

    @staticmethod
    def subscribe_to_feed_posts(on_update, limit=None):
        limit = limit or settings.FEED_PAGE_SIZE
        return hub.subscribe(FeedPost, lambda: list(FeedService._recent_posts(limit)), on_update)

    @staticmethod
    def subscribe_to_user_posts(user_id, on_update):
        return hub.subscribe(FeedPost, lambda: list(FeedService._user_posts(user_id)), on_update)
