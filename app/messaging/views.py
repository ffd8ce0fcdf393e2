"""
ViewSets for the messaging API.

URL Structure (prefixed with /api/v1/inbox/):
    /conversations/                           GET, POST
    /conversations/{id}/messages/             GET, POST
    /conversations/{id}/messages/upload/      POST (multipart)
    /conversations/{id}/read/                 POST
    /threads/                                 GET, POST
    /threads/{id}/                            GET
    /threads/{id}/messages/                   GET, POST
    /threads/{id}/messages/upload/            POST (multipart)
    /threads/{id}/read/                       POST
    /unread/                                  GET

Design Decisions:
    - Querysets only contain the caller's threads, so other threads are 404
    - All business rules live in messaging.services
    - Service failures map to HTTP statuses through core.views.failure_response
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import User
from accounts.services import ProfileDirectory
from attachments.constants import SizePolicy, max_bytes_for
from attachments.services import AttachmentService
from core.constants import ErrorCode
from core.exceptions import NotFoundError
from core.views import failure_response
from messaging.models import Message, Thread, ThreadKind
from messaging.pagination import MessageCursorPagination
from messaging.permissions import IsThreadParticipant
from messaging.serializers import (
    ConversationCreateSerializer,
    HistoryQuerySerializer,
    MessageCreateSerializer,
    MessageSerializer,
    MessageUploadSerializer,
    ThreadCreateSerializer,
    ThreadListQuerySerializer,
    ThreadSerializer,
)
from messaging.services import (
    ConversationService,
    HistoryCursor,
    MessageService,
    ParticipantService,
    ThreadService,
)

if TYPE_CHECKING:
    from collections.abc import Iterable


def _thread_identities(threads: Iterable[Thread]) -> dict:
    user_ids = {
        participant.user_id
        for thread in threads
        for participant in thread.participants.all()
    }
    return ProfileDirectory.resolve_many(user_ids)


def _message_identities(messages: Iterable[Message]) -> dict:
    return ProfileDirectory.resolve_many(
        {message.sender_id for message in messages if message.sender_id is not None}
    )


class ThreadMessagesMixin:
    """
    Message, upload and read actions shared by conversations and threads.

    Subclasses provide get_queryset() returning the caller's threads.
    """

    def get_object(self) -> Thread:
        thread = self.get_queryset().filter(pk=self.kwargs.get("pk")).first()
        if thread is None:
            raise NotFoundError("Thread not found", error_code=ErrorCode.TARGET_NOT_FOUND)
        self.check_object_permissions(self.request, thread)
        return thread

    def _message_response(self, message: Message, status_code=status.HTTP_201_CREATED):
        context = {
            "request": self.request,
            "identities": _message_identities([message]),
        }
        return Response(MessageSerializer(message, context=context).data, status=status_code)

    @extend_schema(
        methods=["GET"],
        operation_id="list_thread_messages",
        summary="Message history",
        description=(
            "Messages in ascending (created_at, id) order, cursor paginated. "
            "Pass the previous watermark as since and since_id to fetch only "
            "newer messages; follow next for the rest of a long catch-up."
        ),
        parameters=[HistoryQuerySerializer],
        responses={
            200: MessageSerializer(many=True),
            404: OpenApiResponse(description="Thread not found or not a participant"),
        },
        tags=["Inbox - Messages"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="append_thread_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="EMPTY_MESSAGE or VALIDATION_ERROR"),
            404: OpenApiResponse(description="Thread not found or not a participant"),
        },
        tags=["Inbox - Messages"],
    )
    @action(detail=True, methods=["get", "post"], pagination_class=MessageCursorPagination)
    def messages(self, request, pk=None):
        thread = self.get_object()

        if request.method == "POST":
            serializer = MessageCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            data = serializer.validated_data

            result = MessageService.append(
                thread,
                request.user,
                body=data["body"],
                attachments=data["attachments"],
                client_token=data["client_token"],
            )
            if not result:
                return failure_response(result)
            return self._message_response(result.data)

        query = HistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        since = params.get("since")
        if since is not None and params.get("since_id") is not None:
            since = HistoryCursor(created_at=since, id=params["since_id"])

        result = MessageService.history_queryset(thread, request.user, since=since)
        if not result:
            return failure_response(result)

        messages = self.paginate_queryset(result.data)
        context = {
            "request": request,
            "identities": _message_identities(messages),
        }
        serializer = MessageSerializer(messages, many=True, context=context)
        return self.get_paginated_response(serializer.data)

    @extend_schema(
        operation_id="upload_thread_message",
        summary="Upload files and send message",
        description=(
            "Stores files[] and appends a message carrying them. If the message "
            "is rejected the stored files are removed."
        ),
        request=MessageUploadSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="EMPTY_MESSAGE or VALIDATION_ERROR"),
            413: OpenApiResponse(description="File exceeds the size ceiling"),
            503: OpenApiResponse(description="Storage unavailable"),
        },
        tags=["Inbox - Messages"],
    )
    @action(
        detail=True,
        methods=["post"],
        url_path="messages/upload",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload(self, request, pk=None):
        thread = self.get_object()

        serializer = MessageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        descriptors = []
        files = request.FILES.getlist("files")
        if files:
            ingested = AttachmentService.ingest(
                files,
                max_size=max_bytes_for(SizePolicy.ATTACHMENT),
                uploaded_by=request.user,
            )
            if not ingested:
                return failure_response(ingested)
            descriptors = ingested.data

        try:
            result = MessageService.append(
                thread,
                request.user,
                body=data["body"],
                attachments=descriptors,
                client_token=data["client_token"],
            )
        except Exception:
            AttachmentService.discard(descriptors)
            raise

        if not result:
            AttachmentService.discard(descriptors)
            return failure_response(result)

        # A repeated client_token returns the earlier message; drop this upload
        kept_urls = {item["url"] for item in result.data.attachments}
        unused = [d for d in descriptors if d.url not in kept_urls]
        if unused:
            AttachmentService.discard(unused)

        return self._message_response(result.data)

    @extend_schema(
        operation_id="mark_thread_read",
        summary="Mark as read",
        request=None,
        responses={200: OpenApiResponse(description="Unread counter reset")},
        tags=["Inbox - Threads"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        thread = self.get_object()

        result = ParticipantService.mark_read(thread, request.user)
        if not result:
            return failure_response(result)

        return Response({"status": "read", "unread_count": 0, "marked": result.data})


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List direct conversations",
        tags=["Inbox - Conversations"],
    ),
)
class ConversationViewSet(ThreadMessagesMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Direct conversations.

    list:
        Caller's direct threads, most recent activity first, never-messaged last.

    create:
        Return the conversation with ``user_id``, creating it if needed.
        200 when it already existed, 201 when created.
    """

    permission_classes = [IsAuthenticated, IsThreadParticipant]
    serializer_class = ThreadSerializer
    pagination_class = None

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Thread.objects.none()
        return ConversationService.list_conversations(self.request.user)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.action == "list":
            context["identities"] = _thread_identities(self.get_queryset())
        return context

    @extend_schema(
        operation_id="find_or_create_conversation",
        summary="Find or create conversation",
        request=ConversationCreateSerializer,
        responses={
            200: ThreadSerializer,
            201: ThreadSerializer,
            400: OpenApiResponse(description="INVALID_PARTICIPANT"),
        },
        tags=["Inbox - Conversations"],
    )
    def create(self, request):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        other = User.objects.filter(pk=serializer.validated_data["user_id"]).first()
        result = ConversationService.get_or_create(request.user, other)
        if not result:
            return failure_response(result)

        thread, created = result.data
        thread = self.get_queryset().get(pk=thread.pk)
        output = ThreadSerializer(
            thread,
            context={"request": request, "identities": _thread_identities([thread])},
        )
        return Response(
            output.data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


@extend_schema_view(
    list=extend_schema(
        operation_id="list_threads",
        summary="List threads",
        parameters=[
            OpenApiParameter(
                name="kind",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                enum=ThreadKind.values,
                description="Only threads of this kind",
            ),
        ],
        tags=["Inbox - Threads"],
    ),
    retrieve=extend_schema(
        operation_id="get_thread",
        summary="Get thread",
        tags=["Inbox - Threads"],
    ),
)
class ThreadViewSet(
    ThreadMessagesMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Enquiry threads (and direct threads, through ?kind=direct).

    list:
        Caller's threads with their unread counts, most recent first.

    create:
        Open an enquiry with ``to_profile``. Sending ``message`` creates the
        thread and its first message together.
    """

    permission_classes = [IsAuthenticated, IsThreadParticipant]
    serializer_class = ThreadSerializer
    pagination_class = None

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Thread.objects.none()
        kind = None
        if self.action == "list":
            query = ThreadListQuerySerializer(data=self.request.query_params)
            query.is_valid(raise_exception=True)
            kind = query.validated_data.get("kind")
        return ThreadService.list_threads(self.request.user, kind=kind)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.action == "list":
            context["identities"] = _thread_identities(self.get_queryset())
        return context

    @extend_schema(
        operation_id="create_thread",
        summary="Open thread",
        request=ThreadCreateSerializer,
        responses={
            201: ThreadSerializer,
            400: OpenApiResponse(
                description="INVALID_PARTICIPANT, EMPTY_MESSAGE or VALIDATION_ERROR"
            ),
            404: OpenApiResponse(description="TARGET_NOT_FOUND"),
        },
        tags=["Inbox - Threads"],
    )
    def create(self, request):
        serializer = ThreadCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        has_message = bool(data["message"].strip() or data["attachments"])

        if has_message and data["thread_type"] == ThreadKind.ENQUIRY:
            result = ThreadService.start_enquiry(
                request.user,
                data["to_profile"],
                data["title"],
                initial_message=data["message"],
                attachments=data["attachments"],
                client_token=data["client_token"],
            )
            if not result:
                return failure_response(result)
            thread, _message = result.data
        else:
            result = ThreadService.create_thread(
                request.user,
                data["to_profile"],
                data["title"],
                thread_type=data["thread_type"],
            )
            if not result:
                return failure_response(result)
            thread = result.data

            if has_message:
                sent = MessageService.append(
                    thread,
                    request.user,
                    body=data["message"],
                    attachments=data["attachments"],
                    client_token=data["client_token"],
                )
                if not sent:
                    return failure_response(sent)

        thread = self.get_queryset().get(pk=thread.pk)
        output = ThreadSerializer(
            thread,
            context={"request": request, "identities": _thread_identities([thread])},
        )
        return Response(output.data, status=status.HTTP_201_CREATED)


class UnreadCountView(APIView):
    """Total unread messages across the caller's threads (inbox badge)."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_unread_total",
        summary="Unread total",
        responses={200: OpenApiResponse(description='{"total": int}')},
        tags=["Inbox - Threads"],
    )
    def get(self, request):
        return Response({"total": ParticipantService.total_unread(request.user)})
