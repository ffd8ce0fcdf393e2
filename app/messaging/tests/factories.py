"""
Factory Boy factories for messaging models.

Usage:
    from messaging.tests.factories import EnquiryFactory, MessageFactory

    thread = EnquiryFactory(initiator=buyer, to_profile=supplier.profile)
    message = MessageFactory(thread=thread, sender=buyer)

Factories write rows directly and bypass the services, so counters and
thread metadata are not maintained. Use the services when a test depends
on them.
"""

import factory

from accounts.tests.factories import UserFactory
from messaging.models import Message, MessageType, Thread, ThreadKind, ThreadParticipant


class EnquiryFactory(factory.django.DjangoModelFactory):
    """
    Enquiry thread with both participants.

    Examples:
        thread = EnquiryFactory()
        archived = EnquiryFactory(is_active=False)
    """

    class Meta:
        model = Thread
        skip_postgeneration_save = True

    kind = ThreadKind.ENQUIRY
    title = factory.Sequence(lambda n: f"Quote request {n}")
    initiator = factory.SubFactory(UserFactory)
    from_profile = factory.LazyAttribute(lambda o: o.initiator.profile)
    to_profile = factory.LazyAttribute(lambda o: UserFactory().profile)
    enquiry_key = factory.LazyAttribute(
        lambda o: f"{o.initiator.pk}:{o.to_profile.pk}:{o.title.lower()}"
    )
    participant_count = 2

    @factory.post_generation
    def participants(obj, create, extracted, **kwargs):
        if not create:
            return
        ThreadParticipant.objects.bulk_create(
            [
                ThreadParticipant(thread=obj, user=obj.initiator),
                ThreadParticipant(thread=obj, user_id=obj.to_profile.user_id),
            ]
        )


class ThreadParticipantFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ThreadParticipant

    thread = factory.SubFactory(EnquiryFactory)
    user = factory.SubFactory(UserFactory)
    unread_count = 0


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Plain text message.

    Examples:
        message = MessageFactory(thread=thread, sender=user)
        image = MessageFactory(
            thread=thread,
            sender=user,
            message_type=MessageType.IMAGE,
            attachments=[{...}],
        )
    """

    class Meta:
        model = Message

    thread = factory.SubFactory(EnquiryFactory)
    sender = factory.LazyAttribute(lambda o: o.thread.initiator)
    body = factory.Faker("sentence")
    message_type = MessageType.TEXT
    attachments = factory.LazyFunction(list)
