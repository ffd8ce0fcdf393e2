"""
Attachment ingest service.

AttachmentService turns a batch of uploaded files into descriptors:

1. Validate the whole batch (count, emptiness, size ceiling) before any write
2. Detect each file's MIME type from its content with python-magic
3. Classify it as image, video or document
4. Write it through default_storage

A batch either lands completely or not at all: a size violation stops the
batch before the first write, and a storage failure removes every file the
batch already wrote.

Usage:
    from attachments.constants import SizePolicy, max_bytes_for
    from attachments.services import AttachmentService

    result = AttachmentService.ingest(files, max_size=max_bytes_for(SizePolicy.AVATAR))
    if not result:
        return failure_response(result)
"""

from __future__ import annotations

import mimetypes
import os
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import magic
from django.core.files.storage import default_storage
from django.utils import timezone
from django.utils.text import get_valid_filename

from attachments.constants import (
    ATTACHMENT_MAX_BYTES,
    GENERIC_MIME_TYPES,
    IMAGE_EXTENSIONS,
    MAX_FILES_PER_BATCH,
    MIME_SNIFF_BYTES,
    VIDEO_EXTENSIONS,
    AttachmentKind,
)
from core.constants import ErrorCode
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from typing import Any

    from django.core.files.uploadedfile import UploadedFile


@dataclass
class AttachmentDescriptor:
    """
    A stored file as embedded in a message.

    Attributes:
        url: Public URL returned by the storage backend
        name: Original file name
        size: Size in bytes
        kind: image, video or document
        mime_type: Detected MIME type
        storage_name: Storage path, kept server-side for cleanup
    """

    url: str
    name: str
    size: int
    kind: str
    mime_type: str
    storage_name: str = field(default="", repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "name": self.name,
            "size": self.size,
            "kind": self.kind,
            "mime_type": self.mime_type,
        }


def _extension(name: str) -> str:
    return os.path.splitext(name or "")[1].lower()


def classify(mime_type: str | None, name: str = "") -> str:
    """
    Map a MIME type (and file name, for generic types) to an attachment kind.

    >>> classify("image/png")
    'image'
    >>> classify("application/octet-stream", "clip.mov")
    'video'
    """
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("image/"):
        return AttachmentKind.IMAGE.value
    if mime_type.startswith("video/"):
        return AttachmentKind.VIDEO.value

    if mime_type in GENERIC_MIME_TYPES:
        ext = _extension(name)
        if ext in IMAGE_EXTENSIONS:
            return AttachmentKind.IMAGE.value
        if ext in VIDEO_EXTENSIONS:
            return AttachmentKind.VIDEO.value

    return AttachmentKind.DOCUMENT.value


class AttachmentService(BaseService):
    """
    Validates and stores message attachments.

    Methods:
        ingest: Store a batch of uploads and return descriptors
        discard: Delete stored files for descriptors that were never used
        detect_mime_type: Content-first MIME detection for one file
    """

    @classmethod
    def detect_mime_type(cls, file: UploadedFile) -> str:
        """
        Detect a file's MIME type.

        Content sniffing comes first; the client's declared content type and
        then the file name are only consulted when sniffing is inconclusive.
        """
        file.seek(0)
        header = file.read(MIME_SNIFF_BYTES)
        file.seek(0)

        detected = ""
        if header:
            try:
                detected = magic.from_buffer(header, mime=True) or ""
            except magic.MagicException as exc:
                cls.get_logger().warning(
                    f"MIME sniffing failed for {getattr(file, 'name', '')!r}: {exc}"
                )

        if detected and detected not in GENERIC_MIME_TYPES:
            return detected

        declared = (getattr(file, "content_type", "") or "").lower()
        if declared and declared not in GENERIC_MIME_TYPES:
            return declared

        guessed, _ = mimetypes.guess_type(getattr(file, "name", "") or "")
        return guessed or detected or "application/octet-stream"

    @classmethod
    def _validate_batch(
        cls, files: Sequence[UploadedFile], max_size: int
    ) -> ServiceResult | None:
        if not files:
            return ServiceResult.failure(
                "At least one file is required",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        if len(files) > MAX_FILES_PER_BATCH:
            return ServiceResult.failure(
                f"At most {MAX_FILES_PER_BATCH} files can be uploaded at once",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        for upload in files:
            if not upload.size:
                return ServiceResult.failure(
                    f"File '{upload.name}' is empty",
                    error_code=ErrorCode.VALIDATION_ERROR,
                )
            if upload.size > max_size:
                limit_mb = max_size / (1024 * 1024)
                cls.get_logger().warning(
                    f"Rejected upload batch: {upload.name} is {upload.size} bytes "
                    f"(limit {max_size})"
                )
                return ServiceResult.failure(
                    f"File '{upload.name}' exceeds the {limit_mb:g}MB limit",
                    error_code=ErrorCode.FILE_TOO_LARGE,
                )

        return None

    @staticmethod
    def _storage_path(name: str) -> str:
        now = timezone.now()
        safe_name = get_valid_filename(os.path.basename(name or "")) or "file"
        return f"attachments/{now:%Y}/{now:%m}/{uuid.uuid4().hex}/{safe_name}"

    @classmethod
    def ingest(
        cls,
        files: Sequence[UploadedFile],
        max_size: int = ATTACHMENT_MAX_BYTES,
        uploaded_by=None,
    ) -> ServiceResult[list[AttachmentDescriptor]]:
        """
        Store a batch of files and return their descriptors in input order.

        Args:
            files: Uploaded files (Django UploadedFile instances)
            max_size: Per-file ceiling in bytes chosen by the caller
            uploaded_by: Optional user, used for logging only

        Returns:
            ServiceResult with list of AttachmentDescriptor, or failure with
            VALIDATION_ERROR, FILE_TOO_LARGE or UNAVAILABLE
        """
        files = list(files or [])
        invalid = cls._validate_batch(files, max_size)
        if invalid is not None:
            return invalid

        descriptors: list[AttachmentDescriptor] = []
        try:
            for upload in files:
                mime_type = cls.detect_mime_type(upload)
                stored_name = default_storage.save(cls._storage_path(upload.name), upload)
                descriptors.append(
                    AttachmentDescriptor(
                        url=default_storage.url(stored_name),
                        name=upload.name,
                        size=upload.size,
                        kind=classify(mime_type, upload.name),
                        mime_type=mime_type,
                        storage_name=stored_name,
                    )
                )
        except OSError:
            cls.get_logger().exception(
                f"Storage write failed after {len(descriptors)} of {len(files)} files; "
                "removing partial batch"
            )
            cls.discard(descriptors)
            return ServiceResult.failure(
                "File storage is temporarily unavailable. Please retry.",
                error_code=ErrorCode.UNAVAILABLE,
            )

        uploader = getattr(uploaded_by, "pk", None)
        cls.get_logger().info(
            f"Stored {len(descriptors)} attachment(s) for user {uploader}"
        )
        return ServiceResult.success(descriptors)

    @classmethod
    def discard(cls, descriptors: Iterable[AttachmentDescriptor]) -> int:
        """
        Delete stored files for descriptors that never reached a message.

        Returns:
            Number of files removed
        """
        removed = 0
        for descriptor in descriptors:
            if not descriptor.storage_name:
                continue
            try:
                default_storage.delete(descriptor.storage_name)
                removed += 1
            except OSError:
                cls.get_logger().exception(
                    f"Could not delete orphaned attachment {descriptor.storage_name}"
                )
        return removed
