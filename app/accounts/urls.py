"""
URL configuration for account identity lookups.

Mounted under /api/v1/inbox/ by config/urls.py.
"""

from django.urls import path

from accounts.views import ProfileIdentityView

app_name = "accounts"

urlpatterns = [
    path("profiles/<int:pk>/", ProfileIdentityView.as_view(), name="profile-identity"),
]
