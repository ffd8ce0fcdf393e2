"""
Attachment classification tables and size policies.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

MAX_FILES_PER_BATCH = 10

# Bytes read from the start of a file for content sniffing
MIME_SNIFF_BYTES = 2048


class AttachmentKind(models.TextChoices):
    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    DOCUMENT = "document", "Document"


class SizePolicy(models.TextChoices):
    """Upload ceilings chosen by the caller, not by the file."""

    AVATAR = "avatar", "Avatar"
    HEADER = "header", "Header image"
    ATTACHMENT = "attachment", "Message attachment"


AVATAR_MAX_BYTES = 1 * 1024 * 1024  # 1MB
HEADER_MAX_BYTES = 2 * 1024 * 1024  # 2MB
ATTACHMENT_MAX_BYTES = 5 * 1024 * 1024  # 5MB


def max_bytes_for(policy: str) -> int:
    """Return the byte ceiling for a size policy name."""
    if policy == SizePolicy.AVATAR:
        return AVATAR_MAX_BYTES
    if policy == SizePolicy.HEADER:
        return HEADER_MAX_BYTES
    return getattr(settings, "INBOX_ATTACHMENT_MAX_BYTES", ATTACHMENT_MAX_BYTES)


# Detected types that say nothing about the content
GENERIC_MIME_TYPES: set[str] = {
    "",
    "application/octet-stream",
    "binary/octet-stream",
    "application/x-empty",
}

# Extension fallback when content sniffing is inconclusive
IMAGE_EXTENSIONS: set[str] = {
    ".jpg",
    ".jpeg",
    ".jpe",
    ".png",
    ".gif",
    ".webp",
    ".heic",
    ".heif",
    ".svg",
    ".bmp",
    ".tif",
    ".tiff",
}

VIDEO_EXTENSIONS: set[str] = {
    ".mp4",
    ".m4v",
    ".mov",
    ".qt",
    ".avi",
    ".webm",
    ".mkv",
}
