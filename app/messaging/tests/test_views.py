"""
API tests for conversations, threads, messages and unread counters.
"""

import base64

from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework.test import APIClient

from messaging.models import Message, Thread, ThreadKind
from messaging.services import MessageService, ParticipantService

BASE_URL = "/api/v1/inbox"

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def _stored_files(media_root):
    return [path for path in media_root.rglob("*") if path.is_file()]


class TestConversationEndpoints:
    def test_create_returns_201_then_200(self, buyer_client, supplier):
        created = buyer_client.post(f"{BASE_URL}/conversations/", {"user_id": supplier.pk})
        existing = buyer_client.post(f"{BASE_URL}/conversations/", {"user_id": supplier.pk})

        assert created.status_code == 201
        assert existing.status_code == 200
        assert created.data["id"] == existing.data["id"]
        assert created.data["kind"] == ThreadKind.DIRECT
        assert created.data["counterpart"]["display_name"] == "Acme Fasteners"

    def test_create_with_self_is_invalid_participant(self, buyer_client, buyer):
        response = buyer_client.post(f"{BASE_URL}/conversations/", {"user_id": buyer.pk})

        assert response.status_code == 400
        assert response.data["error_code"] == "INVALID_PARTICIPANT"

    def test_create_with_unknown_user_is_invalid_participant(self, buyer_client):
        response = buyer_client.post(f"{BASE_URL}/conversations/", {"user_id": 999999})

        assert response.status_code == 400
        assert response.data["error_code"] == "INVALID_PARTICIPANT"

    def test_create_without_user_id_is_validation_error(self, buyer_client):
        response = buyer_client.post(f"{BASE_URL}/conversations/", {})

        assert response.status_code == 400
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert "user_id" in response.data["errors"]

    def test_list_shows_unread_and_counterpart(self, buyer_client, supplier, conversation):
        MessageService.append(conversation, supplier, body="Quote attached")

        response = buyer_client.get(f"{BASE_URL}/conversations/")

        assert response.status_code == 200
        assert len(response.data) == 1
        row = response.data[0]
        assert row["id"] == conversation.id
        assert row["unread_count"] == 1
        assert row["last_message_preview"] == "Quote attached"
        assert row["counterpart"]["company_name"] == "Acme Fasteners"

    def test_requires_authentication(self, db):
        response = APIClient().get(f"{BASE_URL}/conversations/")

        assert response.status_code == 401


class TestThreadEndpoints:
    def test_create_enquiry_without_message(self, buyer_client, supplier):
        response = buyer_client.post(
            f"{BASE_URL}/threads/",
            {"to_profile": supplier.pk, "title": "Room block enquiry"},
        )

        assert response.status_code == 201
        assert response.data["kind"] == ThreadKind.ENQUIRY
        assert response.data["title"] == "Room block enquiry"
        assert response.data["unread_count"] == 0
        assert response.data["last_message_at"] is None

    def test_create_enquiry_with_first_message(self, buyer_client, buyer, supplier):
        response = buyer_client.post(
            f"{BASE_URL}/threads/",
            {
                "to_profile": supplier.pk,
                "title": "Room block enquiry",
                "message": "Need 50 rooms",
                "client_token": "first-send",
            },
            format="json",
        )

        thread = Thread.objects.get(pk=response.data["id"])
        assert response.status_code == 201
        assert response.data["last_message_preview"] == "Need 50 rooms"
        assert ParticipantService.get_unread_count(thread, supplier) == 1
        assert ParticipantService.get_unread_count(thread, buyer) == 0

    def test_create_direct_thread_through_threads(self, buyer_client, supplier):
        response = buyer_client.post(
            f"{BASE_URL}/threads/",
            {"to_profile": supplier.pk, "thread_type": "direct", "message": "Hi"},
        )

        assert response.status_code == 201
        assert response.data["kind"] == ThreadKind.DIRECT
        assert response.data["last_message_preview"] == "Hi"

    def test_unknown_target_is_404(self, buyer_client):
        response = buyer_client.post(
            f"{BASE_URL}/threads/", {"to_profile": 999999, "title": "Anything"}
        )

        assert response.status_code == 404
        assert response.data["error_code"] == "TARGET_NOT_FOUND"

    def test_list_filters_by_kind(self, buyer_client, conversation, enquiry):
        everything = buyer_client.get(f"{BASE_URL}/threads/")
        enquiries = buyer_client.get(f"{BASE_URL}/threads/", {"kind": "enquiry"})

        assert {row["id"] for row in everything.data} == {conversation.id, enquiry.id}
        assert [row["id"] for row in enquiries.data] == [enquiry.id]

    def test_list_rejects_unknown_kind(self, buyer_client):
        response = buyer_client.get(f"{BASE_URL}/threads/", {"kind": "group"})

        assert response.status_code == 400

    def test_retrieve(self, supplier_client, enquiry):
        response = supplier_client.get(f"{BASE_URL}/threads/{enquiry.id}/")

        assert response.status_code == 200
        assert response.data["counterpart"]["display_name"] == "Dana Buyer"

    def test_outsider_cannot_see_thread(self, outsider_client, enquiry):
        response = outsider_client.get(f"{BASE_URL}/threads/{enquiry.id}/")

        assert response.status_code == 404
        assert response.data["error_code"] == "TARGET_NOT_FOUND"


class TestMessageEndpoints:
    def test_append_returns_message_with_sender(self, buyer_client, buyer, enquiry):
        response = buyer_client.post(
            f"{BASE_URL}/threads/{enquiry.id}/messages/", {"body": "Need 50 rooms"}
        )

        assert response.status_code == 201
        assert response.data["body"] == "Need 50 rooms"
        assert response.data["sender_id"] == buyer.pk
        assert response.data["sender"]["display_name"] == "Dana Buyer"
        assert response.data["message_type"] == "text"

    def test_empty_message_is_rejected(self, buyer_client, enquiry):
        response = buyer_client.post(
            f"{BASE_URL}/threads/{enquiry.id}/messages/", {"body": ""}
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "EMPTY_MESSAGE"

    def test_attachment_only_message_is_accepted(self, buyer_client, conversation):
        response = buyer_client.post(
            f"{BASE_URL}/conversations/{conversation.id}/messages/",
            {
                "attachments": [
                    {
                        "url": "/media/attachments/2026/10/abc/quote.pdf",
                        "name": "quote.pdf",
                        "size": 2048,
                        "kind": "document",
                        "mime_type": "application/pdf",
                    }
                ]
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["message_type"] == "file"
        assert response.data["attachments"][0]["kind"] == "document"

    def test_repeated_client_token_returns_same_message(self, buyer_client, enquiry):
        url = f"{BASE_URL}/threads/{enquiry.id}/messages/"
        payload = {"body": "Hello", "client_token": "abc-123"}

        first = buyer_client.post(url, payload)
        second = buyer_client.post(url, payload)

        assert first.data["id"] == second.data["id"]
        assert Message.objects.filter(thread=enquiry).count() == 1

    def test_outsider_cannot_append(self, outsider_client, enquiry):
        response = outsider_client.post(
            f"{BASE_URL}/threads/{enquiry.id}/messages/", {"body": "Hi"}
        )

        assert response.status_code == 404

    def test_client_created_at_is_ignored(self, buyer_client, buyer, enquiry):
        MessageService.append(enquiry, buyer, body="earlier")
        url = f"{BASE_URL}/threads/{enquiry.id}/messages/"

        response = buyer_client.post(
            url, {"body": "late", "created_at": "2000-01-01T00:00:00Z"}
        )

        message = Message.objects.get(pk=response.data["id"])
        assert response.status_code == 201
        assert message.created_at.year != 2000
        history = buyer_client.get(url)
        assert [m["body"] for m in history.data["results"]] == ["earlier", "late"]

    def test_history_pages_with_cursor(self, buyer_client, buyer, enquiry):
        for index in range(3):
            MessageService.append(enquiry, buyer, body=f"m{index}")

        response = buyer_client.get(
            f"{BASE_URL}/threads/{enquiry.id}/messages/", {"page_size": 2}
        )

        assert response.status_code == 200
        assert [m["body"] for m in response.data["results"]] == ["m0", "m1"]
        assert response.data["previous"] is None
        assert response.data["next"] is not None

        rest = buyer_client.get(response.data["next"])

        assert [m["body"] for m in rest.data["results"]] == ["m2"]
        assert rest.data["next"] is None

    def test_history_equal_timestamps_in_id_order_across_pages(
        self, buyer_client, buyer, supplier, enquiry
    ):
        for index, sender in enumerate([buyer, supplier, buyer]):
            MessageService.append(enquiry, sender, body=f"m{index}")
        Message.objects.filter(thread=enquiry).update(created_at=timezone.now())
        url = f"{BASE_URL}/threads/{enquiry.id}/messages/"

        bodies = []
        response = buyer_client.get(url, {"page_size": 2})
        while True:
            bodies += [m["body"] for m in response.data["results"]]
            if response.data["next"] is None:
                break
            response = buyer_client.get(response.data["next"])

        by_id = list(
            Message.objects.filter(thread=enquiry).order_by("id").values_list("body", flat=True)
        )
        assert bodies == by_id == ["m0", "m1", "m2"]

    def test_history_since_watermark(self, buyer_client, buyer, supplier, enquiry):
        MessageService.append(enquiry, buyer, body="first")
        url = f"{BASE_URL}/threads/{enquiry.id}/messages/"
        watermark = buyer_client.get(url).data["watermark"]
        MessageService.append(enquiry, supplier, body="reply")

        response = buyer_client.get(
            url, {"since": watermark["created_at"], "since_id": watermark["id"]}
        )

        assert [m["body"] for m in response.data["results"]] == ["reply"]
        assert response.data["watermark"]["id"] > watermark["id"]

    def test_history_since_watermark_with_equal_timestamps(
        self, buyer_client, buyer, enquiry
    ):
        for index in range(3):
            MessageService.append(enquiry, buyer, body=f"m{index}")
        Message.objects.filter(thread=enquiry).update(created_at=timezone.now())
        url = f"{BASE_URL}/threads/{enquiry.id}/messages/"

        first = buyer_client.get(url, {"page_size": 2}).data
        rest = buyer_client.get(
            url,
            {
                "since": first["watermark"]["created_at"],
                "since_id": first["watermark"]["id"],
            },
        ).data

        assert [m["body"] for m in first["results"]] == ["m0", "m1"]
        assert [m["body"] for m in rest["results"]] == ["m2"]

    def test_empty_history_has_no_watermark(self, buyer_client, enquiry):
        response = buyer_client.get(f"{BASE_URL}/threads/{enquiry.id}/messages/")

        assert response.data["results"] == []
        assert response.data["watermark"] is None

    def test_history_since_id_requires_since(self, buyer_client, enquiry):
        response = buyer_client.get(
            f"{BASE_URL}/threads/{enquiry.id}/messages/", {"since_id": 3}
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "VALIDATION_ERROR"

    def test_history_rejects_page_size_zero(self, buyer_client, enquiry):
        response = buyer_client.get(
            f"{BASE_URL}/threads/{enquiry.id}/messages/", {"page_size": 0}
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "VALIDATION_ERROR"

    def test_attachment_from_outside_media_is_rejected(self, buyer_client, conversation):
        response = buyer_client.post(
            f"{BASE_URL}/conversations/{conversation.id}/messages/",
            {
                "attachments": [
                    {
                        "url": "https://files.example.net/quote.pdf",
                        "name": "quote.pdf",
                        "size": 2048,
                        "kind": "document",
                        "mime_type": "application/pdf",
                    }
                ]
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "VALIDATION_ERROR"


class TestUploadEndpoint:
    def test_upload_and_send(self, buyer_client, enquiry, media_root):
        photo = SimpleUploadedFile("photo.png", PNG_BYTES, content_type="image/png")

        response = buyer_client.post(
            f"{BASE_URL}/threads/{enquiry.id}/messages/upload/",
            {"files": [photo], "body": ""},
            format="multipart",
        )

        assert response.status_code == 201
        assert response.data["message_type"] == "image"
        assert response.data["attachments"][0]["kind"] == "image"
        assert len(_stored_files(media_root)) == 1

    def test_empty_upload_is_rejected_without_storing(self, buyer_client, enquiry, media_root):
        response = buyer_client.post(
            f"{BASE_URL}/threads/{enquiry.id}/messages/upload/",
            {"body": ""},
            format="multipart",
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "EMPTY_MESSAGE"
        assert _stored_files(media_root) == []

    def test_oversized_file_is_413(self, settings, buyer_client, enquiry, media_root):
        settings.INBOX_ATTACHMENT_MAX_BYTES = 1024
        big = SimpleUploadedFile("big.bin", b"a" * 2048, content_type="application/octet-stream")

        response = buyer_client.post(
            f"{BASE_URL}/threads/{enquiry.id}/messages/upload/",
            {"files": [big]},
            format="multipart",
        )

        assert response.status_code == 413
        assert response.data["error_code"] == "FILE_TOO_LARGE"
        assert _stored_files(media_root) == []

    def test_repeated_token_discards_new_upload(self, buyer_client, enquiry, media_root):
        url = f"{BASE_URL}/threads/{enquiry.id}/messages/upload/"

        def send():
            photo = SimpleUploadedFile("photo.png", PNG_BYTES, content_type="image/png")
            return buyer_client.post(
                url, {"files": [photo], "client_token": "up-1"}, format="multipart"
            )

        first = send()
        second = send()

        assert first.data["id"] == second.data["id"]
        assert len(_stored_files(media_root)) == 1


class TestReadEndpoints:
    def test_mark_read_resets_counter(self, buyer_client, buyer, supplier, enquiry):
        MessageService.append(enquiry, supplier, body="one")
        MessageService.append(enquiry, supplier, body="two")

        response = buyer_client.post(f"{BASE_URL}/threads/{enquiry.id}/read/")

        assert response.status_code == 200
        assert response.data == {"status": "read", "unread_count": 0, "marked": 2}
        assert ParticipantService.get_unread_count(enquiry, buyer) == 0

    def test_unread_total(self, buyer_client, supplier, conversation, enquiry):
        MessageService.append(conversation, supplier, body="direct")
        MessageService.append(enquiry, supplier, body="enquiry")

        response = buyer_client.get(f"{BASE_URL}/unread/")

        assert response.status_code == 200
        assert response.data == {"total": 2}
