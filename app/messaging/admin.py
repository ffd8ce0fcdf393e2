"""
Django admin configuration for messaging models.

Provides admin interfaces for:
- Thread management (deactivation instead of deletion)
- Participant counters
- Message moderation (read-only)
"""

from django.contrib import admin

from messaging.models import DirectThreadPair, Message, Thread, ThreadParticipant


class ThreadParticipantInline(admin.TabularInline):
    """Inline display of participants in thread admin."""

    model = ThreadParticipant
    extra = 0
    readonly_fields = ["unread_count", "last_read_at", "joined_at"]
    raw_id_fields = ["user"]


@admin.register(Thread)
class ThreadAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "kind",
        "title",
        "participant_count",
        "is_active",
        "created_at",
        "last_message_at",
    ]
    list_filter = ["kind", "is_active", "created_at"]
    search_fields = ["title", "id"]
    readonly_fields = [
        "created_at",
        "updated_at",
        "enquiry_key",
        "participant_count",
        "last_message_at",
        "last_message_preview",
        "last_message_sender",
    ]
    raw_id_fields = ["initiator", "from_profile", "to_profile"]
    inlines = [ThreadParticipantInline]
    ordering = ["-created_at"]


@admin.register(DirectThreadPair)
class DirectThreadPairAdmin(admin.ModelAdmin):
    list_display = ["thread", "user_lower", "user_higher"]
    raw_id_fields = ["thread", "user_lower", "user_higher"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Messages are immutable; the admin only displays them."""

    list_display = ["id", "thread", "sender", "message_type", "is_read", "created_at"]
    list_filter = ["message_type", "is_read", "created_at"]
    search_fields = ["body"]
    raw_id_fields = ["thread", "sender"]
    readonly_fields = [
        "thread",
        "sender",
        "body",
        "message_type",
        "attachments",
        "client_token",
        "unread_applied",
        "is_read",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False
