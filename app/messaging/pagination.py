"""
Pagination classes for the messaging API.

MessageCursorPagination pages a thread's history oldest-first.

Design Decisions:
    - Cursors encode (created_at, id), so messages sharing a timestamp are
      neither skipped nor repeated across pages
    - Default page size comes from INBOX_HISTORY_PAGE_SIZE at request time
    - Each page carries a watermark for since/since_id catch-up requests
"""

from rest_framework import serializers
from rest_framework.pagination import CursorPagination
from rest_framework.response import Response

from messaging.constants import MAX_HISTORY_PAGE_SIZE, history_page_size
from messaging.services import HistoryCursor


class MessageCursorPagination(CursorPagination):
    """
    Cursor pagination for message history.

    Default: INBOX_HISTORY_PAGE_SIZE messages per page
    Maximum: 100 messages per page

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of messages (optional override)
    """

    max_page_size = MAX_HISTORY_PAGE_SIZE
    page_size_query_param = "page_size"
    ordering = ("created_at", "id")
    cursor_query_param = "cursor"

    def get_page_size(self, request):
        self.page_size = history_page_size()
        return super().get_page_size(request)

    def get_watermark(self):
        if not self.page:
            return None
        cursor = HistoryCursor.after(self.page[-1])
        return {
            "created_at": serializers.DateTimeField().to_representation(cursor.created_at),
            "id": cursor.id,
        }

    def get_paginated_response(self, data):
        return Response(
            {
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
                "results": data,
                "watermark": self.get_watermark(),
            }
        )

    def get_paginated_response_schema(self, schema):
        response_schema = super().get_paginated_response_schema(schema)
        response_schema["properties"]["watermark"] = {
            "type": "object",
            "nullable": True,
            "properties": {
                "created_at": {"type": "string", "format": "date-time"},
                "id": {"type": "integer"},
            },
        }
        return response_schema
