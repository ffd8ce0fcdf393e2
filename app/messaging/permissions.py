"""
Permission classes for the messaging API.

Thread querysets are already limited to the caller's threads, so these
checks guard objects fetched by other routes (e.g. detail actions).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from messaging.models import Message, Thread

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsThreadParticipant(permissions.BasePermission):
    """Allows access only to participants of the thread."""

    message = "You are not a participant in this thread."

    def has_object_permission(
        self, request: Request, view: APIView, obj: Thread | Message
    ) -> bool:
        if not request.user.is_authenticated:
            return False

        thread = obj.thread if isinstance(obj, Message) else obj
        return thread.has_participant(request.user)
