"""
Tests for messaging model constraints and helpers.
"""

from datetime import timedelta
from unittest import mock

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.tests.factories import UserFactory
from messaging.models import DirectThreadPair, Thread, ThreadKind
from messaging.tests.factories import EnquiryFactory, MessageFactory


class TestThread:
    def test_enquiry_without_target_is_rejected(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            Thread.objects.create(kind=ThreadKind.ENQUIRY, title="No target")

    def test_direct_thread_needs_no_target(self, db):
        thread = Thread.objects.create(kind=ThreadKind.DIRECT)

        assert thread.is_direct
        assert not thread.is_enquiry

    def test_enquiry_key_is_unique(self, db):
        thread = EnquiryFactory()

        with pytest.raises(IntegrityError), transaction.atomic():
            Thread.objects.create(
                kind=ThreadKind.ENQUIRY,
                title=thread.title,
                to_profile=thread.to_profile,
                enquiry_key=thread.enquiry_key,
            )

    def test_has_participant(self, db):
        thread = EnquiryFactory()
        stranger = UserFactory()

        assert thread.has_participant(thread.initiator)
        assert thread.has_participant(thread.to_profile.user)
        assert not thread.has_participant(stranger)

    def test_get_participant_for_user(self, db):
        thread = EnquiryFactory()

        participant = thread.get_participant_for_user(thread.initiator)

        assert participant is not None
        assert participant.unread_count == 0
        assert thread.get_participant_for_user(UserFactory()) is None

    def test_never_messaged_threads_sort_last(self, db):
        quiet = EnquiryFactory()
        busy = EnquiryFactory()
        message = MessageFactory(thread=busy)
        Thread.objects.filter(pk=busy.pk).update(last_message_at=message.created_at)

        assert list(Thread.objects.filter(pk__in=[quiet.pk, busy.pk])) == [busy, quiet]

    def test_str(self, db):
        thread = EnquiryFactory(title="M8 bolts")

        assert str(thread) == f"Enquiry({thread.pk}): M8 bolts"


class TestDirectThreadPair:
    def test_lower_must_be_less_than_higher(self, db):
        low, high = sorted([UserFactory(), UserFactory()], key=lambda u: u.pk)
        thread = Thread.objects.create(kind=ThreadKind.DIRECT)

        with pytest.raises(IntegrityError), transaction.atomic():
            DirectThreadPair.objects.create(thread=thread, user_lower=high, user_higher=low)

    def test_pair_is_unique(self, db):
        low, high = sorted([UserFactory(), UserFactory()], key=lambda u: u.pk)
        first = Thread.objects.create(kind=ThreadKind.DIRECT)
        second = Thread.objects.create(kind=ThreadKind.DIRECT)
        DirectThreadPair.objects.create(thread=first, user_lower=low, user_higher=high)

        with pytest.raises(IntegrityError), transaction.atomic():
            DirectThreadPair.objects.create(thread=second, user_lower=low, user_higher=high)


class TestThreadParticipant:
    def test_user_joins_thread_once(self, db):
        thread = EnquiryFactory()

        with pytest.raises(IntegrityError), transaction.atomic():
            thread.participants.create(user=thread.initiator)


class TestMessage:
    def test_client_token_is_unique_per_thread_and_sender(self, db):
        message = MessageFactory(client_token="retry-1")

        with pytest.raises(IntegrityError), transaction.atomic():
            MessageFactory(
                thread=message.thread,
                sender=message.sender,
                client_token="retry-1",
            )

    def test_blank_client_tokens_do_not_collide(self, db):
        first = MessageFactory(client_token="")
        second = MessageFactory(thread=first.thread, sender=first.sender, client_token="")

        assert first.pk != second.pk

    def test_default_ordering_is_creation_then_id(self, db, backdate):
        thread = EnquiryFactory()
        later = MessageFactory(thread=thread)
        earlier = backdate(MessageFactory(thread=thread), 60)

        assert list(thread.messages.all()) == [earlier, later]

    def test_created_at_is_stamped_with_timezone_now_on_save(self, db):
        stamped = timezone.now()

        with mock.patch("django.utils.timezone.now", return_value=stamped):
            message = MessageFactory(created_at=stamped - timedelta(days=365))

        message.refresh_from_db()
        assert message.created_at == stamped
