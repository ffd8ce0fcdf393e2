"""
Messaging limits and defaults.

Values that operators may tune are read from settings at call time:
    INBOX_HISTORY_PAGE_SIZE, INBOX_PREVIEW_LENGTH
"""

from django.conf import settings

DEFAULT_HISTORY_PAGE_SIZE = 30
MAX_HISTORY_PAGE_SIZE = 100

DEFAULT_PREVIEW_LENGTH = 140

MAX_BODY_LENGTH = 10_000
MAX_ATTACHMENTS_PER_MESSAGE = 10
MAX_TITLE_LENGTH = 200
MAX_CLIENT_TOKEN_LENGTH = 64

# Retry key for an enquiry's first message when the client sends none
OPENING_MESSAGE_TOKEN = "enquiry:opening"


def history_page_size() -> int:
    return getattr(settings, "INBOX_HISTORY_PAGE_SIZE", DEFAULT_HISTORY_PAGE_SIZE)


def preview_length() -> int:
    return getattr(settings, "INBOX_PREVIEW_LENGTH", DEFAULT_PREVIEW_LENGTH)


def attachment_url_prefix() -> str:
    """URL prefix every stored attachment shares (see AttachmentService.ingest)."""
    return f"{settings.MEDIA_URL.rstrip('/')}/attachments/"
