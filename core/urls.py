from django.urls import path
from .views import FeedListView, FeedPostDetailView, UserFeedView


urlpatterns = [
    path("", FeedListView.as_view(), name="feed-list"),
    path("<int:post_id>/", FeedPostDetailView.as_view(), name="feed-post-detail"),
    path("user/<int:user_id>/", UserFeedView.as_view(), name="feed-user"),
]
