"""
Serializers for the messaging API.

Serializer Hierarchy:
    ThreadSerializer: Thread with caller's unread count and counterpart
    ParticipantSerializer: Membership with identity and read state
    MessageSerializer: Message with sender identity

    ConversationCreateSerializer: Start or reopen a direct conversation
    ThreadCreateSerializer: Open an enquiry, optionally with a first message
    MessageCreateSerializer: Append a message
    HistoryQuerySerializer: page / since / page_size query parameters
    ThreadListQuerySerializer: kind filter

Design Decisions:
    - Display names and avatars come from ProfileDirectory, never from
      the thread rows themselves
    - Views pass pre-resolved identities in context["identities"] so a
      page of rows costs one directory lookup
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import serializers

from accounts.serializers import IdentitySerializer
from accounts.services import ProfileDirectory
from attachments.serializers import AttachmentDescriptorSerializer
from messaging.constants import (
    MAX_ATTACHMENTS_PER_MESSAGE,
    MAX_BODY_LENGTH,
    MAX_CLIENT_TOKEN_LENGTH,
    MAX_HISTORY_PAGE_SIZE,
)
from messaging.models import Message, Thread, ThreadKind, ThreadParticipant

if TYPE_CHECKING:
    from accounts.services import Identity


def _identity(context: dict, user_id: int | None) -> dict | None:
    if user_id is None:
        return None
    identities: dict[int, Identity] = context.get("identities") or {}
    identity = identities.get(user_id) or ProfileDirectory.resolve(user_id)
    if identity is None:
        return None
    return IdentitySerializer(identity).data


# =============================================================================
# Read Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """Message as returned by append and history."""

    thread_id = serializers.IntegerField(read_only=True)
    sender_id = serializers.IntegerField(read_only=True, allow_null=True)
    sender = serializers.SerializerMethodField(
        help_text="Display data of the sender"
    )
    attachments = AttachmentDescriptorSerializer(many=True, read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "thread_id",
            "sender_id",
            "sender",
            "body",
            "message_type",
            "attachments",
            "is_read",
            "client_token",
            "created_at",
        ]
        read_only_fields = fields

    def get_sender(self, obj: Message) -> dict | None:
        return _identity(self.context, obj.sender_id)


class ParticipantSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    identity = serializers.SerializerMethodField()

    class Meta:
        model = ThreadParticipant
        fields = ["user_id", "identity", "unread_count", "last_read_at", "joined_at"]
        read_only_fields = fields

    def get_identity(self, obj: ThreadParticipant) -> dict | None:
        return _identity(self.context, obj.user_id)


class ThreadSerializer(serializers.ModelSerializer):
    """
    Thread for inbox lists and detail.

    Computed fields:
    - unread_count: The caller's counter (annotated by the list queries)
    - counterpart: Display data of the other participant
    """

    unread_count = serializers.SerializerMethodField(
        help_text="Unread messages for the current user"
    )
    counterpart = serializers.SerializerMethodField(
        help_text="The other participant's display data"
    )
    from_profile_id = serializers.IntegerField(read_only=True, allow_null=True)
    to_profile_id = serializers.IntegerField(read_only=True, allow_null=True)
    last_message_sender_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Thread
        fields = [
            "id",
            "kind",
            "title",
            "from_profile_id",
            "to_profile_id",
            "is_active",
            "participant_count",
            "counterpart",
            "unread_count",
            "last_message_at",
            "last_message_preview",
            "last_message_sender_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _current_user_id(self) -> int | None:
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return None
        return request.user.pk

    def get_unread_count(self, obj: Thread) -> int:
        annotated = getattr(obj, "unread_count", None)
        if annotated is not None:
            return annotated
        user_id = self._current_user_id()
        for participant in obj.participants.all():
            if participant.user_id == user_id:
                return participant.unread_count
        return 0

    def get_counterpart(self, obj: Thread) -> dict | None:
        user_id = self._current_user_id()
        for participant in obj.participants.all():
            if participant.user_id != user_id:
                return _identity(self.context, participant.user_id)
        return None


# =============================================================================
# Write Serializers
# =============================================================================


class ConversationCreateSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(
        help_text="User to start a direct conversation with"
    )


class MessageCreateSerializer(serializers.Serializer):
    """
    Append a message.

    Emptiness is checked by the service so that a blank message reports
    EMPTY_MESSAGE rather than a field error.
    """

    body = serializers.CharField(
        max_length=MAX_BODY_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        trim_whitespace=False,
        help_text="Message text (max 10,000 characters)",
    )
    attachments = AttachmentDescriptorSerializer(
        many=True,
        required=False,
        default=list,
        max_length=MAX_ATTACHMENTS_PER_MESSAGE,
        help_text="Descriptors returned by the attachments endpoint",
    )
    client_token = serializers.CharField(
        max_length=MAX_CLIENT_TOKEN_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        help_text="Client retry key; repeating it returns the original message",
    )


class MessageUploadSerializer(serializers.Serializer):
    """Multipart fields accompanying files[] on the upload-and-send endpoint."""

    body = serializers.CharField(
        max_length=MAX_BODY_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        trim_whitespace=False,
    )
    client_token = serializers.CharField(
        max_length=MAX_CLIENT_TOKEN_LENGTH,
        required=False,
        allow_blank=True,
        default="",
    )


class ThreadCreateSerializer(serializers.Serializer):
    """
    Open a thread with a target profile.

    When ``message`` is given the enquiry and its first message are created
    together.
    """

    to_profile = serializers.IntegerField(help_text="Target profile id")
    title = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        help_text="Enquiry subject (required for enquiries)",
    )
    thread_type = serializers.ChoiceField(
        choices=ThreadKind.choices,
        default=ThreadKind.ENQUIRY,
    )
    message = serializers.CharField(
        max_length=MAX_BODY_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        trim_whitespace=False,
    )
    attachments = AttachmentDescriptorSerializer(
        many=True,
        required=False,
        default=list,
        max_length=MAX_ATTACHMENTS_PER_MESSAGE,
    )
    client_token = serializers.CharField(
        max_length=MAX_CLIENT_TOKEN_LENGTH,
        required=False,
        allow_blank=True,
        default="",
    )


class HistoryQuerySerializer(serializers.Serializer):
    """Filters for message history. Paging itself is by the cursor parameter."""

    since = serializers.DateTimeField(required=False)
    since_id = serializers.IntegerField(required=False, min_value=1)
    cursor = serializers.CharField(required=False)
    page_size = serializers.IntegerField(
        required=False, min_value=1, max_value=MAX_HISTORY_PAGE_SIZE
    )

    def validate(self, attrs):
        if "since_id" in attrs and "since" not in attrs:
            raise serializers.ValidationError({"since": ["Required when since_id is given."]})
        return attrs


class ThreadListQuerySerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=ThreadKind.choices, required=False)
