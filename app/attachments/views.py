"""
API view for attachment upload.

    POST /api/v1/inbox/attachments/   multipart files[], policy?
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from attachments.constants import max_bytes_for
from attachments.serializers import (
    AttachmentDescriptorSerializer,
    AttachmentUploadSerializer,
)
from attachments.services import AttachmentService
from core.views import failure_response


class AttachmentUploadView(APIView):
    """
    Upload one or more files and receive descriptors to attach to a message.

    Request:
        Content-Type: multipart/form-data
        - files (required, repeated): Files to upload, at most 10
        - policy (optional): avatar, header or attachment (default)

    Response:
        201 Created: List of descriptors in upload order
        400 Bad Request: No files, too many files, or an empty file
        413 Payload Too Large: A file exceeds the policy ceiling
        503 Service Unavailable: Storage write failed, nothing was kept
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        operation_id="upload_attachments",
        summary="Upload attachments",
        request=AttachmentUploadSerializer,
        responses={
            201: AttachmentDescriptorSerializer(many=True),
            400: OpenApiResponse(description="No files, too many files, or empty file"),
            413: OpenApiResponse(description="File exceeds the size ceiling"),
            503: OpenApiResponse(description="Storage unavailable"),
        },
        tags=["Inbox - Attachments"],
    )
    def post(self, request):
        options = AttachmentUploadSerializer(data=request.data)
        options.is_valid(raise_exception=True)

        result = AttachmentService.ingest(
            request.FILES.getlist("files"),
            max_size=max_bytes_for(options.validated_data["policy"]),
            uploaded_by=request.user,
        )
        if not result:
            return failure_response(result)

        data = [descriptor.to_dict() for descriptor in result.data]
        return Response(data, status=status.HTTP_201_CREATED)
