"""
URL configuration for the inbox service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - JWT token endpoints
        token/                     - Obtain access/refresh pair
        token/refresh/             - Refresh access token
    /api/v1/inbox/                 - Inbox endpoints
        conversations/             - Direct conversation list/find-or-create
        conversations/{id}/messages/ - Message history/append
        conversations/{id}/messages/upload/ - Upload files and send
        conversations/{id}/read/   - Mark conversation as read
        threads/                   - Thread list/open enquiry
        threads/{id}/              - Thread detail
        threads/{id}/messages/     - Message history/append
        threads/{id}/messages/upload/ - Upload files and send
        threads/{id}/read/         - Mark thread as read
        unread/                    - Total unread badge count
        attachments/               - Upload attachment batch
        profiles/{id}/             - Resolve profile identity

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
inbox_patterns = [
    path("", include("messaging.urls")),
    path("", include("attachments.urls")),
    path("", include("accounts.urls")),
]

api_v1_patterns = [
    # Authentication (Simple JWT)
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # Inbox
    path("inbox/", include(inbox_patterns)),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Inbox Admin"
admin.site.site_title = "Inbox Admin Portal"
admin.site.index_title = "Conversations, threads and messages"
