"""
Messaging models.

Models:
    Thread: A conversation, either direct (1:1) or an enquiry
    DirectThreadPair: Enforces one direct thread per unordered user pair
    ThreadParticipant: A user's membership with unread counter and read marker
    Message: An immutable message with attachments held by value

Design Decisions:
    - Direct conversations and enquiries share Thread, Message and
      ThreadParticipant; ``kind`` tells them apart
    - Threads are deactivated, never deleted through the API
    - Unread counters are stored, not computed, and only change through
      single UPDATE statements
    - Message order is server-assigned: (created_at, id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.models import BaseModel

if TYPE_CHECKING:
    from accounts.models import User


class ThreadKind(models.TextChoices):
    """
    Kind of thread.

    DIRECT: Ad-hoc chat between exactly two users, unique per pair
    ENQUIRY: Subject-anchored thread from an initiator to a target company
    """

    DIRECT = "direct", "Direct"
    ENQUIRY = "enquiry", "Enquiry"


class MessageType(models.TextChoices):
    """
    Derived from a message's attachments.

    TEXT: No attachments
    IMAGE: Every attachment is an image
    FILE: At least one non-image attachment
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    FILE = "file", "File"


class Thread(BaseModel):
    """
    A conversation between two users.

    Fields:
        kind: direct or enquiry
        title: Enquiry subject (empty for direct threads)
        initiator: User who opened the thread (null for direct threads)
        from_profile: Initiator's profile (enquiries only)
        to_profile: Target company's profile (required for enquiries)
        enquiry_key: "<initiator>:<target>:<normalized title>", unique
        is_active: False once a thread is archived
        participant_count: Cached number of participants
        last_message_at: Timestamp of the newest message (list ordering)
        last_message_preview: Short text for inbox lists
        last_message_sender: Sender of the newest message

    Relationships:
        participants: ThreadParticipant rows
        messages: Message rows
        direct_pair: DirectThreadPair for direct threads
    """

    kind = models.CharField(
        max_length=10,
        choices=ThreadKind.choices,
        default=ThreadKind.ENQUIRY,
        db_index=True,
        help_text="Kind of thread (direct or enquiry)",
    )

    title = models.CharField(
        max_length=200,
        blank=True,
        default="",
        help_text="Enquiry subject (empty for direct threads)",
    )

    initiator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="initiated_threads",
        help_text="User who opened the thread (null for direct threads)",
    )

    from_profile = models.ForeignKey(
        "accounts.Profile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="outgoing_threads",
        help_text="Initiator's profile for enquiries",
    )

    to_profile = models.ForeignKey(
        "accounts.Profile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="incoming_threads",
        help_text="Target company's profile for enquiries",
    )

    enquiry_key = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Deduplication key for enquiries (initiator, target, title)",
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive threads are hidden and reject new messages",
    )

    participant_count = models.PositiveIntegerField(
        default=0,
        help_text="Number of participants (cached)",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting thread lists)",
    )

    last_message_preview = models.CharField(
        max_length=200,
        blank=True,
        default="",
        help_text="Preview of the most recent message",
    )

    last_message_sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Sender of the most recent message",
    )

    class Meta:
        db_table = "messaging_thread"
        ordering = [F("last_message_at").desc(nulls_last=True), "-created_at"]
        indexes = [
            models.Index(
                fields=["kind", "is_active"],
                name="msg_thread_kind_active_idx",
            ),
            models.Index(
                fields=["-last_message_at"],
                name="msg_thread_last_msg_idx",
                condition=Q(is_active=True),
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(kind=ThreadKind.DIRECT) | Q(to_profile__isnull=False),
                name="enquiry_requires_target",
            ),
        ]

    def __str__(self) -> str:
        if self.kind == ThreadKind.DIRECT:
            return f"Direct({self.pk})"
        return f"Enquiry({self.pk}): {self.title}"

    @property
    def is_direct(self) -> bool:
        return self.kind == ThreadKind.DIRECT

    @property
    def is_enquiry(self) -> bool:
        return self.kind == ThreadKind.ENQUIRY

    def get_participant_for_user(self, user: User) -> ThreadParticipant | None:
        return self.participants.filter(user=user).first()

    def has_participant(self, user: User) -> bool:
        return self.participants.filter(user=user).exists()


class DirectThreadPair(models.Model):
    """
    Enforces uniqueness of direct threads between two users.

    Pairs are stored in canonical order (lower user id first), so the
    unique constraint holds whichever user starts the conversation.

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One thread per pair
        - CheckConstraint(user_lower_id < user_higher_id): Canonical order
    """

    thread = models.OneToOneField(
        Thread,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct thread this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this pair",
    )

    class Meta:
        db_table = "messaging_direct_thread_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_thread_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="direct_pair_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"


class ThreadParticipant(BaseModel):
    """
    A user's membership in a thread.

    Unread State Machine:
        - A message from someone else: unread_count -> unread_count + 1
        - mark_read: unread_count -> 0, last_read_at -> now
        Nothing else writes unread_count.

    Fields:
        thread: Thread this membership belongs to
        user: Participating user
        unread_count: Messages from others since the last read
        last_read_at: When the user last marked the thread read
        joined_at: When the user was added
    """

    thread = models.ForeignKey(
        Thread,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text="Thread this participation belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="thread_participations",
        help_text="User participating in the thread",
    )

    unread_count = models.PositiveIntegerField(
        default=0,
        help_text="Messages from other participants since the last read",
    )

    last_read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time the user marked the thread read",
    )

    joined_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user joined this thread",
    )

    class Meta:
        db_table = "messaging_thread_participant"
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["thread", "user"],
                name="unique_thread_participant",
            ),
        ]
        indexes = [
            models.Index(
                fields=["user", "unread_count"],
                name="msg_part_user_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Participant(thread={self.thread_id}, user={self.user_id})"


class Message(BaseModel):
    """
    A message in a thread.

    Messages are immutable once created. ``created_at`` is stamped by the
    server and, with ``id``, defines the order within a thread.

    Fields:
        thread: Thread the message belongs to
        sender: Author
        body: Text (may be empty when attachments are present)
        message_type: text, image or file (derived from attachments)
        attachments: List of attachment descriptors
        is_read: True once another participant marked the thread read
        client_token: Optional client retry key
        unread_applied: Set once the message has bumped unread counters
    """

    thread = models.ForeignKey(
        Thread,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Thread this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    body = models.TextField(
        blank=True,
        default="",
        help_text="Message text",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Derived from attachments (text, image or file)",
    )

    attachments = models.JSONField(
        default=list,
        blank=True,
        help_text="Attachment descriptors: url, name, size, kind, mime_type",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Whether the recipient has read this message",
    )

    client_token = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Client-generated retry key (unique per thread and sender)",
    )

    unread_applied = models.BooleanField(
        default=False,
        help_text="Whether recipients' unread counters include this message",
    )

    class Meta:
        db_table = "messaging_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["thread", "created_at", "id"],
                name="msg_message_thread_order_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["thread", "sender", "client_token"],
                condition=~Q(client_token=""),
                name="unique_message_client_token",
            ),
        ]

    def __str__(self) -> str:
        return f"Message({self.pk}) in thread {self.thread_id}"
