"""
Serializers for attachment upload.
"""

from rest_framework import serializers

from attachments.constants import AttachmentKind, SizePolicy


class AttachmentDescriptorSerializer(serializers.Serializer):
    """
    An attachment as embedded in a message.

    Used both to render ingested files and to validate descriptors a
    client sends back with a message.
    """

    url = serializers.CharField(max_length=2048)
    name = serializers.CharField(max_length=255)
    size = serializers.IntegerField(min_value=0)
    kind = serializers.ChoiceField(choices=AttachmentKind.choices)
    mime_type = serializers.CharField(max_length=255)


class AttachmentUploadSerializer(serializers.Serializer):
    """
    Multipart upload options.

    Files are read from ``request.FILES.getlist("files")`` so that empty and
    oversized files reach the service and get its error codes.
    """

    policy = serializers.ChoiceField(
        choices=SizePolicy.choices,
        default=SizePolicy.ATTACHMENT,
        help_text="Size ceiling to apply (avatar 1MB, header 2MB, attachment 5MB)",
    )
