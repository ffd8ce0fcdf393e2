"""
URL configuration for the messaging API.

URL Structure:
    Conversations (direct):
        /conversations/                        GET, POST
        /conversations/{id}/messages/          GET, POST
        /conversations/{id}/messages/upload/   POST
        /conversations/{id}/read/              POST

    Threads (enquiries, or any kind via ?kind=):
        /threads/                              GET, POST
        /threads/{id}/                         GET
        /threads/{id}/messages/                GET, POST
        /threads/{id}/messages/upload/         POST
        /threads/{id}/read/                    POST

    Badge:
        /unread/                               GET

All URLs are prefixed with /api/v1/inbox/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from messaging.views import ConversationViewSet, ThreadViewSet, UnreadCountView

router = DefaultRouter()
router.register(r"conversations", ConversationViewSet, basename="conversation")
router.register(r"threads", ThreadViewSet, basename="thread")

app_name = "messaging"

urlpatterns = [
    path("", include(router.urls)),
    path("unread/", UnreadCountView.as_view(), name="unread-total"),
]
