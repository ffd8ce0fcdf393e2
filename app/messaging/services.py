"""
Service layer for messaging business logic.

This module provides services for:
- ConversationService: Direct conversation lookup and creation
- ThreadService: Enquiry thread creation and thread lists
- ParticipantService: Unread counters and read receipts
- MessageService: Message append and history sync

Concurrency:
    Creation paths run in a savepoint guarded by a unique constraint. When a
    concurrent request wins the race the constraint raises IntegrityError,
    the savepoint rolls back, and the winner's row is returned instead.
    Counter changes are single UPDATE statements with F() expressions.

Usage:
    from messaging.services import ConversationService, MessageService

    result = ConversationService.find_or_create(request.user, other_user)
    if result.success:
        thread = result.data
        MessageService.append(thread, request.user, body="Hello")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.core.paginator import Paginator
from django.db import IntegrityError, transaction
from django.db.models import F, OuterRef, Q, Subquery, Sum
from django.utils import timezone

from accounts.models import Profile
from accounts.services import ProfileDirectory
from attachments.constants import AttachmentKind
from attachments.services import AttachmentDescriptor
from core.constants import ErrorCode
from core.services import BaseService, ServiceResult
from messaging.constants import (
    MAX_ATTACHMENTS_PER_MESSAGE,
    MAX_BODY_LENGTH,
    MAX_CLIENT_TOKEN_LENGTH,
    MAX_HISTORY_PAGE_SIZE,
    MAX_TITLE_LENGTH,
    OPENING_MESSAGE_TOKEN,
    attachment_url_prefix,
    history_page_size,
    preview_length,
)
from messaging.models import (
    DirectThreadPair,
    Message,
    MessageType,
    Thread,
    ThreadKind,
    ThreadParticipant,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from datetime import datetime
    from typing import Any

    from django.db.models import QuerySet

    from accounts.models import User


def _user_threads(user: User) -> QuerySet[Thread]:
    """Active threads the user participates in, annotated with their unread count."""
    own_row = ThreadParticipant.objects.filter(thread=OuterRef("pk"), user=user)
    return (
        Thread.objects.filter(is_active=True, participants__user=user)
        .annotate(unread_count=Subquery(own_row.values("unread_count")[:1]))
        .select_related("last_message_sender")
        .prefetch_related("participants")
        .order_by(F("last_message_at").desc(nulls_last=True), "-created_at", "-id")
    )


def _reactivate(thread: Thread) -> Thread:
    if not thread.is_active:
        now = timezone.now()
        Thread.objects.filter(pk=thread.pk).update(is_active=True, updated_at=now)
        thread.is_active = True
        thread.updated_at = now
    return thread


class ConversationService(BaseService):
    """
    Direct conversations: exactly one thread per unordered pair of users.

    Methods:
        find_or_create: Return the pair's thread, creating it if needed
        get_or_create: Same, also reporting whether it was created
        list_conversations: A user's direct threads, most recent first
    """

    @staticmethod
    def _canonical_pair(user_a: User, user_b: User) -> tuple[User, User]:
        if user_a.pk < user_b.pk:
            return user_a, user_b
        return user_b, user_a

    @classmethod
    def _find_pair(cls, user_lower: User, user_higher: User) -> DirectThreadPair | None:
        return (
            DirectThreadPair.objects.select_related("thread")
            .filter(user_lower=user_lower, user_higher=user_higher)
            .first()
        )

    @classmethod
    def get_or_create(
        cls, user_a: User | None, user_b: User | None
    ) -> ServiceResult[tuple[Thread, bool]]:
        """
        Return ``(thread, created)`` for the pair ``{user_a, user_b}``.

        Returns:
            ServiceResult with (Thread, created) or INVALID_PARTICIPANT failure
        """
        if user_a is None or user_b is None:
            return ServiceResult.failure(
                "Both participants are required",
                error_code=ErrorCode.INVALID_PARTICIPANT,
            )

        if user_a.pk == user_b.pk:
            return ServiceResult.failure(
                "Cannot start a conversation with yourself",
                error_code=ErrorCode.INVALID_PARTICIPANT,
            )

        if not user_a.is_active or not user_b.is_active:
            return ServiceResult.failure(
                "Cannot start a conversation with an inactive user",
                error_code=ErrorCode.INVALID_PARTICIPANT,
            )

        user_lower, user_higher = cls._canonical_pair(user_a, user_b)

        pair = cls._find_pair(user_lower, user_higher)
        if pair is not None:
            cls.get_logger().debug(
                f"Found direct thread {pair.thread_id} for users "
                f"{user_lower.pk} and {user_higher.pk}"
            )
            return ServiceResult.success((_reactivate(pair.thread), False))

        try:
            with cls.atomic():
                thread = Thread.objects.create(
                    kind=ThreadKind.DIRECT,
                    participant_count=2,
                )
                DirectThreadPair.objects.create(
                    thread=thread,
                    user_lower=user_lower,
                    user_higher=user_higher,
                )
                ThreadParticipant.objects.bulk_create(
                    [
                        ThreadParticipant(thread=thread, user=user_lower),
                        ThreadParticipant(thread=thread, user=user_higher),
                    ]
                )
        except IntegrityError:
            pair = DirectThreadPair.objects.select_related("thread").get(
                user_lower=user_lower, user_higher=user_higher
            )
            cls.get_logger().info(
                f"Recovered concurrent creation of direct thread {pair.thread_id} "
                f"for users {user_lower.pk} and {user_higher.pk}"
            )
            return ServiceResult.success((_reactivate(pair.thread), False))

        cls.get_logger().info(
            f"Created direct thread {thread.id} for users "
            f"{user_lower.pk} and {user_higher.pk}"
        )
        return ServiceResult.success((thread, True))

    @classmethod
    def find_or_create(cls, user_a: User | None, user_b: User | None) -> ServiceResult[Thread]:
        """
        Return the unique direct thread between two users, creating it if absent.

        Argument order does not matter: (a, b) and (b, a) give the same thread.
        """
        result = cls.get_or_create(user_a, user_b)
        if not result:
            return result
        thread, _created = result.data
        return ServiceResult.success(thread)

    @classmethod
    def list_conversations(cls, user: User) -> QuerySet[Thread]:
        """Direct threads for ``user``, newest activity first, never-messaged last."""
        return _user_threads(user).filter(kind=ThreadKind.DIRECT)


class ThreadService(BaseService):
    """
    Enquiry threads and combined thread lists.

    Methods:
        create_thread: Open an enquiry (or direct thread) with a target profile
        start_enquiry: Open an enquiry and post its first message atomically
        list_threads: A user's threads with their unread counts
        enquiry_key: Deduplication key for an enquiry
    """

    @staticmethod
    def normalize_title(title: str | None) -> str:
        return " ".join((title or "").split())

    @classmethod
    def enquiry_key(cls, initiator: User, target: Profile, title: str) -> str:
        return f"{initiator.pk}:{target.pk}:{cls.normalize_title(title).lower()}"

    @classmethod
    def _find_enquiry(cls, key: str) -> Thread | None:
        return Thread.objects.filter(enquiry_key=key).first()

    @classmethod
    def create_thread(
        cls,
        initiator: User | None,
        target_profile_id,
        title: str = "",
        thread_type: str = ThreadKind.ENQUIRY,
    ) -> ServiceResult[Thread]:
        """
        Open a thread from ``initiator`` to the owner of ``target_profile_id``.

        Both participants start with ``unread_count=0``. Repeating the call
        with the same initiator, target and title returns the existing thread.

        Returns:
            ServiceResult with Thread, or failure with TARGET_NOT_FOUND,
            INVALID_PARTICIPANT or VALIDATION_ERROR
        """
        target = ProfileDirectory.get_profile(target_profile_id)
        if target is None:
            return ServiceResult.failure(
                "Target profile not found",
                error_code=ErrorCode.TARGET_NOT_FOUND,
            )

        if initiator is None or not initiator.is_active:
            return ServiceResult.failure(
                "Initiator must be an active user",
                error_code=ErrorCode.INVALID_PARTICIPANT,
            )

        if target.user_id == initiator.pk:
            return ServiceResult.failure(
                "Cannot open a thread with your own profile",
                error_code=ErrorCode.INVALID_PARTICIPANT,
            )

        if thread_type == ThreadKind.DIRECT:
            return ConversationService.find_or_create(initiator, target.user)

        if thread_type != ThreadKind.ENQUIRY:
            return ServiceResult.failure(
                f"Unknown thread type '{thread_type}'",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"thread_type": ["Must be 'enquiry' or 'direct'."]},
            )

        title = cls.normalize_title(title)
        missing = cls.validate_required(title=title)
        if missing is not None:
            return missing
        if len(title) > MAX_TITLE_LENGTH:
            return ServiceResult.failure(
                f"Subject must be at most {MAX_TITLE_LENGTH} characters",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"title": [f"Ensure this field has no more than {MAX_TITLE_LENGTH} characters."]},
            )

        from_profile = Profile.objects.filter(pk=initiator.pk).first()
        if from_profile is None:
            return ServiceResult.failure(
                "Initiator has no profile",
                error_code=ErrorCode.INVALID_PARTICIPANT,
            )

        key = cls.enquiry_key(initiator, target, title)
        existing = cls._find_enquiry(key)
        if existing is not None:
            cls.get_logger().debug(f"Found existing enquiry {existing.id} for key {key!r}")
            return ServiceResult.success(_reactivate(existing))

        try:
            with cls.atomic():
                thread = Thread.objects.create(
                    kind=ThreadKind.ENQUIRY,
                    title=title,
                    initiator=initiator,
                    from_profile=from_profile,
                    to_profile=target,
                    enquiry_key=key,
                    participant_count=2,
                )
                ThreadParticipant.objects.bulk_create(
                    [
                        ThreadParticipant(thread=thread, user=initiator),
                        ThreadParticipant(thread=thread, user_id=target.user_id),
                    ]
                )
        except IntegrityError:
            thread = Thread.objects.get(enquiry_key=key)
            cls.get_logger().info(
                f"Recovered concurrent creation of enquiry {thread.id} for key {key!r}"
            )
            return ServiceResult.success(_reactivate(thread))

        cls.get_logger().info(
            f"Created enquiry {thread.id} from user {initiator.pk} "
            f"to profile {target.pk}"
        )
        return ServiceResult.success(thread)

    @classmethod
    def start_enquiry(
        cls,
        initiator: User | None,
        target_profile_id,
        title: str,
        initial_message: str = "",
        attachments: Sequence[Any] | None = None,
        client_token: str = "",
    ) -> ServiceResult[tuple[Thread, Message]]:
        """
        Open an enquiry and post its first message in one transaction.

        If the message is rejected nothing is kept, including a newly
        created thread. Without a client_token the opening message is
        keyed on OPENING_MESSAGE_TOKEN, so a retried start that lands on
        an existing enquiry returns its first message instead of posting
        the text again.

        Returns:
            ServiceResult with (Thread, Message)
        """
        with cls.atomic():
            thread_result = cls.create_thread(initiator, target_profile_id, title)
            if not thread_result:
                return thread_result

            message_result = MessageService.append(
                thread_result.data,
                initiator,
                body=initial_message,
                attachments=attachments,
                client_token=client_token or OPENING_MESSAGE_TOKEN,
            )
            if not message_result:
                transaction.set_rollback(True)
                return message_result

        thread = thread_result.data
        thread.refresh_from_db()
        return ServiceResult.success((thread, message_result.data))

    @classmethod
    def list_threads(cls, user: User, kind: str | None = None) -> QuerySet[Thread]:
        """
        Threads the user participates in, most recent activity first.

        Each thread carries an ``unread_count`` annotation for ``user``.
        """
        queryset = _user_threads(user)
        if kind:
            queryset = queryset.filter(kind=kind)
        return queryset


class ParticipantService(BaseService):
    """
    Unread counters and read receipts.

    Methods:
        mark_read: Reset the caller's counter and mark others' messages read
        increment_unread: Count a new message for everyone but its sender
        get_unread_count: One participant's counter
        total_unread: Sum of a user's counters across active threads
    """

    @classmethod
    def mark_read(cls, thread: Thread, user: User) -> ServiceResult[int]:
        """
        Reset ``user``'s unread counter on ``thread`` to zero.

        A user who is not a participant gets a successful no-op.

        Returns:
            ServiceResult with the number of messages newly marked read
        """
        now = timezone.now()
        with cls.atomic():
            updated = ThreadParticipant.objects.filter(thread=thread, user=user).update(
                unread_count=0,
                last_read_at=now,
                updated_at=now,
            )
            if not updated:
                cls.get_logger().debug(
                    f"mark_read ignored: user {user.pk} is not in thread {thread.pk}"
                )
                return ServiceResult.success(0)

            marked = (
                Message.objects.filter(thread=thread, is_read=False)
                .exclude(sender=user)
                .update(is_read=True, updated_at=now)
            )

        cls.get_logger().debug(
            f"User {user.pk} read thread {thread.pk} ({marked} messages marked)"
        )
        return ServiceResult.success(marked)

    @classmethod
    def increment_unread(cls, message: Message) -> ServiceResult[int]:
        """
        Add one to the unread counter of every participant except the sender.

        Applied at most once per message: a retry after success changes
        nothing.

        Returns:
            ServiceResult with the number of counters incremented
        """
        with cls.atomic():
            claimed = Message.objects.filter(pk=message.pk, unread_applied=False).update(
                unread_applied=True
            )
            if not claimed:
                cls.get_logger().debug(
                    f"Unread already applied for message {message.pk}"
                )
                return ServiceResult.success(0)

            incremented = (
                ThreadParticipant.objects.filter(thread_id=message.thread_id)
                .exclude(user_id=message.sender_id)
                .update(unread_count=F("unread_count") + 1, updated_at=timezone.now())
            )

        message.unread_applied = True
        return ServiceResult.success(incremented)

    @classmethod
    def get_unread_count(cls, thread: Thread, user: User) -> int:
        count = (
            ThreadParticipant.objects.filter(thread=thread, user=user)
            .values_list("unread_count", flat=True)
            .first()
        )
        return count or 0

    @classmethod
    def total_unread(cls, user: User) -> int:
        """Unread messages across all of the user's active threads."""
        total = ThreadParticipant.objects.filter(
            user=user, thread__is_active=True
        ).aggregate(total=Sum("unread_count"))["total"]
        return total or 0


@dataclass
class HistoryPage:
    """
    One page of a thread's history.

    Attributes:
        messages: Messages in ascending (created_at, id) order
        page: 1-based page number, or None for a ``since`` query
        page_size: Maximum messages per page
        has_more: Whether later messages exist beyond this page
    """

    messages: list[Message]
    page: int | None
    page_size: int
    has_more: bool

    @property
    def watermark(self) -> HistoryCursor | None:
        """Position of the newest message on the page, for the next ``since``."""
        if not self.messages:
            return None
        return HistoryCursor.after(self.messages[-1])


@dataclass(frozen=True)
class HistoryCursor:
    """
    A position in a thread's history: after (created_at, id).

    Messages can share created_at, so the id is needed to resume inside a
    group of equal timestamps without skipping any of them.
    """

    created_at: datetime
    id: int

    @classmethod
    def after(cls, message: Message) -> HistoryCursor:
        return cls(created_at=message.created_at, id=message.pk)

    def as_filter(self) -> Q:
        return Q(created_at__gt=self.created_at) | Q(
            created_at=self.created_at, id__gt=self.id
        )


class MessageService(BaseService):
    """
    Message append and history.

    Methods:
        append: Post a message and update thread metadata and counters
        history: A page of messages, by page number or since a watermark
        history_queryset: Filtered history queryset for cursor pagination
        iter_history: Generator over every page of a thread
    """

    @staticmethod
    def normalize_attachments(
        attachments: Sequence[Any] | None,
    ) -> tuple[list[dict[str, Any]], dict[str, list[str]] | None]:
        """
        Convert descriptors (objects or dicts) to stored dicts.

        Returns:
            (descriptors, errors); errors is None when every item is valid
        """
        normalized: list[dict[str, Any]] = []
        errors: list[str] = []

        for index, item in enumerate(attachments or []):
            if isinstance(item, AttachmentDescriptor):
                item = item.to_dict()
            if not isinstance(item, dict):
                errors.append(f"Attachment {index} must be an object.")
                continue

            url = item.get("url")
            name = item.get("name")
            size = item.get("size")
            kind = item.get("kind")
            mime_type = item.get("mime_type", "")

            if not isinstance(url, str) or not url:
                errors.append(f"Attachment {index} is missing a url.")
            elif not url.startswith(attachment_url_prefix()):
                errors.append(f"Attachment {index} was not uploaded to this inbox.")
            elif not isinstance(name, str) or not name:
                errors.append(f"Attachment {index} is missing a name.")
            elif isinstance(size, bool) or not isinstance(size, int) or size < 0:
                errors.append(f"Attachment {index} has an invalid size.")
            elif kind not in AttachmentKind.values:
                errors.append(f"Attachment {index} has an unknown kind.")
            elif not isinstance(mime_type, str):
                errors.append(f"Attachment {index} has an invalid mime_type.")
            else:
                normalized.append(
                    {
                        "url": url,
                        "name": name,
                        "size": size,
                        "kind": kind,
                        "mime_type": mime_type,
                    }
                )

        if len(attachments or []) > MAX_ATTACHMENTS_PER_MESSAGE:
            errors.append(
                f"A message can carry at most {MAX_ATTACHMENTS_PER_MESSAGE} attachments."
            )

        return normalized, ({"attachments": errors} if errors else None)

    @staticmethod
    def derive_message_type(attachments: Sequence[dict[str, Any]]) -> str:
        if not attachments:
            return MessageType.TEXT
        if all(item["kind"] == AttachmentKind.IMAGE for item in attachments):
            return MessageType.IMAGE
        return MessageType.FILE

    @staticmethod
    def build_preview(body: str, attachments: Sequence[dict[str, Any]]) -> str:
        """
        Short text shown in thread lists.

        The body's first characters when there is text, otherwise a label
        describing the attachments.
        """
        text = " ".join(body.split())
        if text:
            return text[: min(preview_length(), 200)]

        if len(attachments) > 1:
            return f"Sent {len(attachments)} attachments"
        if attachments:
            kind = attachments[0]["kind"]
            if kind == AttachmentKind.IMAGE:
                return "Sent an image"
            if kind == AttachmentKind.VIDEO:
                return "Sent a video"
        return "Sent an attachment"

    @classmethod
    def _find_by_token(cls, thread: Thread, sender: User, client_token: str) -> Message | None:
        return Message.objects.filter(
            thread=thread, sender=sender, client_token=client_token
        ).first()

    @classmethod
    def append(
        cls,
        thread: Thread | None,
        sender: User | None,
        body: str = "",
        attachments: Sequence[Any] | None = None,
        client_token: str = "",
    ) -> ServiceResult[Message]:
        """
        Post a message to a thread.

        The message time is assigned by the server. Thread metadata and the
        other participants' unread counters are updated in the same
        transaction. A repeated call with the same ``client_token`` returns
        the message created by the first call.

        Returns:
            ServiceResult with Message, or failure with TARGET_NOT_FOUND,
            EMPTY_MESSAGE or VALIDATION_ERROR
        """
        if thread is None or not thread.is_active:
            return ServiceResult.failure(
                "Thread not found",
                error_code=ErrorCode.TARGET_NOT_FOUND,
            )

        if sender is None or not thread.has_participant(sender):
            return ServiceResult.failure(
                "Thread not found",
                error_code=ErrorCode.TARGET_NOT_FOUND,
            )

        body = (body or "").strip()
        if len(body) > MAX_BODY_LENGTH:
            return ServiceResult.failure(
                f"Message must be at most {MAX_BODY_LENGTH} characters",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"body": [f"Ensure this field has no more than {MAX_BODY_LENGTH} characters."]},
            )

        descriptors, errors = cls.normalize_attachments(attachments)
        if errors:
            return ServiceResult.failure(
                "Invalid attachments",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors=errors,
            )

        if not body and not descriptors:
            return ServiceResult.failure(
                "Message must have text or at least one attachment",
                error_code=ErrorCode.EMPTY_MESSAGE,
            )

        client_token = (client_token or "").strip()
        if len(client_token) > MAX_CLIENT_TOKEN_LENGTH:
            return ServiceResult.failure(
                "client_token is too long",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"client_token": [f"Ensure this field has no more than {MAX_CLIENT_TOKEN_LENGTH} characters."]},
            )

        if client_token:
            existing = cls._find_by_token(thread, sender, client_token)
            if existing is not None:
                cls.get_logger().debug(
                    f"Returning message {existing.id} for repeated token {client_token!r}"
                )
                return ServiceResult.success(existing)

        preview = cls.build_preview(body, descriptors)

        try:
            with cls.atomic():
                message = Message.objects.create(
                    thread=thread,
                    sender=sender,
                    body=body,
                    message_type=cls.derive_message_type(descriptors),
                    attachments=descriptors,
                    client_token=client_token,
                )
                # Never move last_message_at backwards under concurrent appends
                Thread.objects.filter(pk=thread.pk).filter(
                    Q(last_message_at__isnull=True)
                    | Q(last_message_at__lte=message.created_at)
                ).update(
                    last_message_at=message.created_at,
                    last_message_preview=preview,
                    last_message_sender=sender,
                    updated_at=message.created_at,
                )
                ParticipantService.increment_unread(message)
        except IntegrityError:
            if not client_token:
                raise
            message = Message.objects.get(
                thread=thread, sender=sender, client_token=client_token
            )
            cls.get_logger().info(
                f"Recovered concurrent append of message {message.id} "
                f"for token {client_token!r}"
            )
            return ServiceResult.success(message)

        thread.last_message_at = message.created_at
        thread.last_message_preview = preview
        thread.last_message_sender = sender

        cls.get_logger().debug(
            f"Appended message {message.id} to thread {thread.pk} by user {sender.pk}"
        )
        return ServiceResult.success(message)

    @staticmethod
    def _ordered(thread: Thread) -> QuerySet[Message]:
        return (
            Message.objects.filter(thread=thread)
            .select_related("sender")
            .order_by("created_at", "id")
        )

    @staticmethod
    def _clamp_page_size(page_size: int | None) -> int:
        size = page_size or history_page_size()
        return max(1, min(int(size), MAX_HISTORY_PAGE_SIZE))

    @staticmethod
    def _since_filter(since: datetime | HistoryCursor) -> Q:
        if isinstance(since, HistoryCursor):
            return since.as_filter()
        return Q(created_at__gt=since)

    @classmethod
    def history_queryset(
        cls,
        thread: Thread,
        user: User,
        since: datetime | HistoryCursor | None = None,
    ) -> ServiceResult[QuerySet[Message]]:
        """
        Lazy queryset of a thread's messages for the caller, oldest first.

        The API pages it with MessageCursorPagination; ``since`` narrows it
        to messages after a timestamp or a HistoryCursor.
        """
        if thread is None or user is None or not thread.has_participant(user):
            return ServiceResult.failure(
                "Thread not found",
                error_code=ErrorCode.TARGET_NOT_FOUND,
            )

        queryset = cls._ordered(thread)
        if since is not None:
            queryset = queryset.filter(cls._since_filter(since))
        return ServiceResult.success(queryset)

    @classmethod
    def history(
        cls,
        thread: Thread,
        user: User,
        page: int | None = None,
        since: datetime | HistoryCursor | None = None,
        page_size: int | None = None,
    ) -> ServiceResult[HistoryPage]:
        """
        Read a thread's messages in ascending (created_at, id) order.

        Args:
            thread: Thread to read
            user: Reader, who must be a participant
            page: 1-based page number (ignored when ``since`` is given)
            since: A timestamp (strictly newer messages) or the ``watermark``
                of a previous page (messages after that exact position)
            page_size: Messages per page, capped at 100

        Returns:
            ServiceResult with HistoryPage, or failure with TARGET_NOT_FOUND
            or VALIDATION_ERROR
        """
        result = cls.history_queryset(thread, user, since=since)
        if not result:
            return result

        size = cls._clamp_page_size(page_size)
        queryset = result.data

        if since is not None:
            rows = list(queryset[: size + 1])
            return ServiceResult.success(
                HistoryPage(
                    messages=rows[:size],
                    page=None,
                    page_size=size,
                    has_more=len(rows) > size,
                )
            )

        page = 1 if page is None else page
        if page < 1:
            return ServiceResult.failure(
                "Page numbers start at 1",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"page": ["Ensure this value is greater than or equal to 1."]},
            )

        paginator = Paginator(queryset, size)
        if page > paginator.num_pages:
            return ServiceResult.success(
                HistoryPage(messages=[], page=page, page_size=size, has_more=False)
            )

        current = paginator.page(page)
        return ServiceResult.success(
            HistoryPage(
                messages=list(current.object_list),
                page=page,
                page_size=size,
                has_more=current.has_next(),
            )
        )

    @classmethod
    def iter_history(
        cls, thread: Thread, page_size: int | None = None
    ) -> Iterator[list[Message]]:
        """
        Yield the whole history in pages, oldest first.

        Pages are fetched lazily by keyset on (created_at, id), so messages
        appended while iterating are picked up at the end.
        """
        size = cls._clamp_page_size(page_size)
        queryset = cls._ordered(thread)
        last = None

        while True:
            batch_qs = queryset
            if last is not None:
                batch_qs = batch_qs.filter(HistoryCursor.after(last).as_filter())
            batch = list(batch_qs[:size])
            if not batch:
                return
            yield batch
            if len(batch) < size:
                return
            last = batch[-1]
