import django.db.models.deletion
import django.db.models.expressions
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Thread",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[("direct", "Direct"), ("enquiry", "Enquiry")],
                        db_index=True,
                        default="enquiry",
                        help_text="Kind of thread (direct or enquiry)",
                        max_length=10,
                    ),
                ),
                (
                    "title",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Enquiry subject (empty for direct threads)",
                        max_length=200,
                    ),
                ),
                (
                    "enquiry_key",
                    models.CharField(
                        blank=True,
                        help_text="Deduplication key for enquiries (initiator, target, title)",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Inactive threads are hidden and reject new messages",
                    ),
                ),
                (
                    "participant_count",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Number of participants (cached)",
                    ),
                ),
                (
                    "last_message_at",
                    models.DateTimeField(
                        blank=True,
                        db_index=True,
                        help_text="Timestamp of most recent message (for sorting thread lists)",
                        null=True,
                    ),
                ),
                (
                    "last_message_preview",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Preview of the most recent message",
                        max_length=200,
                    ),
                ),
                (
                    "initiator",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who opened the thread (null for direct threads)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="initiated_threads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "from_profile",
                    models.ForeignKey(
                        blank=True,
                        help_text="Initiator's profile for enquiries",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="outgoing_threads",
                        to="accounts.profile",
                    ),
                ),
                (
                    "to_profile",
                    models.ForeignKey(
                        blank=True,
                        help_text="Target company's profile for enquiries",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="incoming_threads",
                        to="accounts.profile",
                    ),
                ),
                (
                    "last_message_sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="Sender of the most recent message",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_thread",
                "ordering": [
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("last_message_at"),
                        descending=True,
                        nulls_last=True,
                    ),
                    "-created_at",
                ],
                "indexes": [
                    models.Index(
                        fields=["kind", "is_active"],
                        name="msg_thread_kind_active_idx",
                    ),
                    models.Index(
                        condition=models.Q(("is_active", True)),
                        fields=["-last_message_at"],
                        name="msg_thread_last_msg_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("kind", "direct"),
                            ("to_profile__isnull", False),
                            _connector="OR",
                        ),
                        name="enquiry_requires_target",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DirectThreadPair",
            fields=[
                (
                    "thread",
                    models.OneToOneField(
                        help_text="The direct thread this pair represents",
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="direct_pair",
                        serialize=False,
                        to="messaging.thread",
                    ),
                ),
                (
                    "user_lower",
                    models.ForeignKey(
                        help_text="User with lower ID in this pair",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_higher",
                    models.ForeignKey(
                        help_text="User with higher ID in this pair",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_direct_thread_pair",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_lower", "user_higher"),
                        name="unique_direct_thread_pair",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("user_lower_id__lt", models.F("user_higher_id"))
                        ),
                        name="direct_pair_lower_less_than_higher",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ThreadParticipant",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "unread_count",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Messages from other participants since the last read",
                    ),
                ),
                (
                    "last_read_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Last time the user marked the thread read",
                        null=True,
                    ),
                ),
                (
                    "joined_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        help_text="When the user joined this thread",
                    ),
                ),
                (
                    "thread",
                    models.ForeignKey(
                        help_text="Thread this participation belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="messaging.thread",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User participating in the thread",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="thread_participations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_thread_participant",
                "ordering": ["joined_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["user", "unread_count"],
                        name="msg_part_user_unread_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("thread", "user"),
                        name="unique_thread_participant",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "body",
                    models.TextField(blank=True, default="", help_text="Message text"),
                ),
                (
                    "message_type",
                    models.CharField(
                        choices=[("text", "Text"), ("image", "Image"), ("file", "File")],
                        default="text",
                        help_text="Derived from attachments (text, image or file)",
                        max_length=10,
                    ),
                ),
                (
                    "attachments",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Attachment descriptors: url, name, size, kind, mime_type",
                    ),
                ),
                (
                    "is_read",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the recipient has read this message",
                    ),
                ),
                (
                    "client_token",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Client-generated retry key (unique per thread and sender)",
                        max_length=64,
                    ),
                ),
                (
                    "unread_applied",
                    models.BooleanField(
                        default=False,
                        help_text="Whether recipients' unread counters include this message",
                    ),
                ),
                (
                    "thread",
                    models.ForeignKey(
                        help_text="Thread this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="messaging.thread",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["thread", "created_at", "id"],
                        name="msg_message_thread_order_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("client_token", ""), _negated=True),
                        fields=("thread", "sender", "client_token"),
                        name="unique_message_client_token",
                    ),
                ],
            },
        ),
    ]
