"""
URL configuration for attachment upload.

Mounted under /api/v1/inbox/ by config/urls.py.
"""

from django.urls import path

from attachments.views import AttachmentUploadView

app_name = "attachments"

urlpatterns = [
    path("attachments/", AttachmentUploadView.as_view(), name="upload"),
]
