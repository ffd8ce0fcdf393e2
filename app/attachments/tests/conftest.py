"""
Fixtures for attachment tests.

Every test writes into its own temporary MEDIA_ROOT.
"""

import base64

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


@pytest.fixture
def stored_files(media_root):
    """Callable returning every file currently under MEDIA_ROOT."""

    def _list():
        return [path for path in media_root.rglob("*") if path.is_file()]

    return _list


@pytest.fixture
def png_file():
    return SimpleUploadedFile("photo.png", PNG_BYTES, content_type="image/png")


@pytest.fixture
def pdf_file():
    return SimpleUploadedFile("quote.pdf", PDF_BYTES, content_type="application/pdf")


@pytest.fixture
def make_file():
    """Build an upload of ``size`` bytes."""

    def _make(name="data.bin", size=1024, content_type="application/octet-stream"):
        return SimpleUploadedFile(name, b"a" * size, content_type=content_type)

    return _make
