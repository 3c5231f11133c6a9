"""
FamilyEvents Backend — Media Route Tests
========================================

What:  Attaching external media, uploading files, serving them back and
       deleting them.
How:   libmagic is not needed: app.services.file_service.detect_mime_type
       is patched to report the type each test wants.
"""

import uuid
from pathlib import Path
from unittest.mock import patch

import pytest
import pytest_asyncio

from app.models.media import Media
from app.services.file_service import FILES_URL_PREFIX, file_service

EXTERNAL_MEDIA = {
    "filename": "cake.jpg",
    "original_name": "IMG_0042.jpg",
    "mime_type": "image/jpeg",
    "size": 2048,
    "url": "https://cdn.example.com/cake.jpg",
    "alt_text": "The cake",
}


@pytest_asyncio.fixture
async def event_setup(api, create_user):
    """alice creates the event; bob is a contributor; carol a plain member."""
    alice = await create_user("alice@example.com")
    bob = await create_user("bob@example.com")
    carol = await create_user("carol@example.com")
    family = await api.create_family(alice)
    await api.add_member(alice, family["id"], bob)
    await api.add_member(alice, family["id"], carol)
    event = await api.create_event(alice, family["id"])
    await api.add_contributor(alice, event["id"], bob)
    return alice, bob, carol, event


async def attach(client, user, event_id, **overrides):
    return await client.post(
        f"/api/events/{event_id}/media", json={**EXTERNAL_MEDIA, **overrides}, headers=user.headers
    )


class TestAttachMedia:

    @pytest.mark.asyncio
    async def test_contributor_attaches(self, test_client, event_setup):
        _, bob, _, event = event_setup
        response = await attach(test_client, bob, event["id"])
        assert response.status_code == 201
        body = response.json()
        assert body["uploaded_by_id"] == str(bob.id)
        assert body["uploaded_by"]["email"] == "bob@example.com"
        assert body["alt_text"] == "The cake"

        response = await test_client.get(f"/api/events/{event['id']}/media", headers=bob.headers)
        assert [m["id"] for m in response.json()["media"]] == [body["id"]]

    @pytest.mark.asyncio
    async def test_plain_member_cannot_attach(self, test_client, event_setup):
        _, _, carol, event = event_setup
        response = await attach(test_client, carol, event["id"])
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_size_must_be_positive(self, test_client, event_setup):
        alice, _, _, event = event_setup
        response = await attach(test_client, alice, event["id"], size=0)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_event(self, test_client, event_setup):
        alice, _, _, _ = event_setup
        response = await attach(test_client, alice, uuid.uuid4())
        assert response.status_code == 404


class TestDeleteMedia:

    @pytest.mark.asyncio
    async def test_uploader_deletes(self, test_client, event_setup):
        _, bob, _, event = event_setup
        media = (await attach(test_client, bob, event["id"])).json()
        response = await test_client.delete(
            f"/api/events/{event['id']}/media/{media['id']}", headers=bob.headers
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Media deleted"

    @pytest.mark.asyncio
    async def test_creator_deletes_others_media(self, test_client, event_setup):
        alice, bob, _, event = event_setup
        media = (await attach(test_client, bob, event["id"])).json()
        response = await test_client.delete(
            f"/api/events/{event['id']}/media/{media['id']}", headers=alice.headers
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_can_delete_contributor(self, test_client, api, event_setup):
        alice, bob, carol, event = event_setup
        media = (await attach(test_client, alice, event["id"])).json()

        response = await test_client.delete(
            f"/api/events/{event['id']}/media/{media['id']}", headers=bob.headers
        )
        assert response.status_code == 403

        await test_client.put(
            f"/api/events/{event['id']}/contributors/{bob.id}",
            json={"can_delete": True},
            headers=alice.headers,
        )
        response = await test_client.delete(
            f"/api/events/{event['id']}/media/{media['id']}", headers=bob.headers
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_media_is_404_before_403(self, test_client, event_setup):
        _, _, carol, event = event_setup
        response = await test_client.delete(
            f"/api/events/{event['id']}/media/{uuid.uuid4()}", headers=carol.headers
        )
        assert response.status_code == 404


class TestUploadMedia:

    @pytest.mark.asyncio
    async def test_upload_store_serve_delete(self, test_client, event_setup, sample_png_bytes):
        _, bob, carol, event = event_setup

        with patch("app.services.file_service.detect_mime_type", return_value="image/png"):
            response = await test_client.post(
                f"/api/events/{event['id']}/media/upload",
                files={"file": ("holiday.png", sample_png_bytes, "image/png")},
                data={"alt_text": "Beach", "is_public": "true"},
                headers=bob.headers,
            )
        assert response.status_code == 201, response.text
        media = response.json()
        assert media["original_name"] == "holiday.png"
        assert media["mime_type"] == "image/png"
        assert media["size"] == len(sample_png_bytes)
        assert media["is_public"] is True
        assert media["url"].startswith("/api/files/")
        assert media["filename"].endswith(".png")

        stored = file_service.storage_root / media["url"][len("/api/files/"):]
        assert stored.is_file()

        response = await test_client.get(media["url"], headers=carol.headers)
        assert response.status_code == 200
        assert response.content == sample_png_bytes

        response = await test_client.get(media["url"])
        assert response.status_code == 401

        response = await test_client.delete(
            f"/api/events/{event['id']}/media/{media['id']}", headers=bob.headers
        )
        assert response.status_code == 200
        assert not stored.exists()

    @pytest.mark.asyncio
    async def test_rejected_content_type(self, test_client, event_setup):
        alice, _, _, event = event_setup
        with patch("app.services.file_service.detect_mime_type", return_value="application/pdf"):
            response = await test_client.post(
                f"/api/events/{event['id']}/media/upload",
                files={"file": ("sneaky.png", b"%PDF-1.4 fake", "image/png")},
                headers=alice.headers,
            )
        assert response.status_code == 400
        assert response.json()["details"]["detected_mime"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_rejected_extension(self, test_client, event_setup):
        alice, _, _, event = event_setup
        response = await test_client.post(
            f"/api/events/{event['id']}/media/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=alice.headers,
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "file"

    @pytest.mark.asyncio
    async def test_permission_checked_before_storing(
        self, test_client, event_setup, sample_png_bytes
    ):
        _, _, carol, event = event_setup
        before = {p for p in Path(file_service.storage_root).rglob("*") if p.is_file()}

        with patch("app.services.file_service.detect_mime_type", return_value="image/png"):
            response = await test_client.post(
                f"/api/events/{event['id']}/media/upload",
                files={"file": ("holiday.png", sample_png_bytes, "image/png")},
                headers=carol.headers,
            )
        assert response.status_code == 403

        after = {p for p in Path(file_service.storage_root).rglob("*") if p.is_file()}
        assert after == before

    @pytest.mark.asyncio
    async def test_serving_missing_file(self, test_client, event_setup):
        alice, _, _, _ = event_setup
        response = await test_client.get(
            "/api/files/2024/01/01/does-not-exist.png", headers=alice.headers
        )
        assert response.status_code == 404


async def upload(client, user, event_id, content):
    with patch("app.services.file_service.detect_mime_type", return_value="image/png"):
        response = await client.post(
            f"/api/events/{event_id}/media/upload",
            files={"file": ("holiday.png", content, "image/png")},
            headers=user.headers,
        )
    assert response.status_code == 201, response.text
    return response.json()


class TestServeFile:

    @pytest.mark.asyncio
    async def test_outsider_cannot_fetch_upload(
        self, test_client, create_user, event_setup, sample_png_bytes
    ):
        alice, _, _, event = event_setup
        mallory = await create_user("mallory@example.com")
        media = await upload(test_client, alice, event["id"], sample_png_bytes)

        response = await test_client.get(media["url"], headers=mallory.headers)
        assert response.status_code == 403
        assert response.json()["details"]["reason"] == "not_a_member"

    @pytest.mark.asyncio
    async def test_privacy_hidden_member_cannot_fetch_upload(
        self, test_client, event_setup, sample_png_bytes
    ):
        alice, _, carol, event = event_setup
        media = await upload(test_client, alice, event["id"], sample_png_bytes)
        response = await test_client.post(
            f"/api/events/{event['id']}/privacy",
            json={"user_id": str(carol.id), "can_view": False},
            headers=alice.headers,
        )
        assert response.status_code == 201

        response = await test_client.get(media["url"], headers=carol.headers)
        assert response.status_code == 403

        response = await test_client.get(media["url"], headers=alice.headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unrecorded_file_is_404(self, test_client, event_setup):
        """A file on disk that no upload row points at is not served."""
        alice, _, _, _ = event_setup
        stray = Path(file_service.storage_root) / "2024" / "01" / "01" / "stray.png"
        stray.parent.mkdir(parents=True, exist_ok=True)
        stray.write_bytes(b"x")

        response = await test_client.get("/api/files/2024/01/01/stray.png", headers=alice.headers)
        assert response.status_code == 404


class TestStorageUrls:

    @pytest.mark.asyncio
    async def test_attach_rejects_storage_url(self, test_client, event_setup):
        alice, _, _, event = event_setup
        response = await attach(
            test_client, alice, event["id"], url=f"{FILES_URL_PREFIX}2024/06/15/someone-else.png"
        )
        assert response.status_code == 400
        assert [f["field"] for f in response.json()["details"]["fields"]] == ["url"]

    @pytest.mark.asyncio
    async def test_deleting_row_with_copied_url_keeps_file(
        self, test_client, api, create_user, session_factory, event_setup, sample_png_bytes
    ):
        alice, _, _, event = event_setup
        media = await upload(test_client, alice, event["id"], sample_png_bytes)
        stored = file_service.storage_root / media["url"][len(FILES_URL_PREFIX):]

        mallory = await create_user("mallory@example.com")
        family = await api.create_family(mallory, "Elsewhere")
        other_event = await api.create_event(mallory, family["id"], title="Picnic")

        # Row carrying alice's url but not created by the upload endpoint
        async with session_factory() as session:
            copied = Media(
                event_id=uuid.UUID(other_event["id"]),
                uploaded_by_id=mallory.id,
                filename="copy.png",
                original_name="copy.png",
                mime_type="image/png",
                size=len(sample_png_bytes),
                url=media["url"],
            )
            session.add(copied)
            await session.commit()
            copied_id = copied.id

        response = await test_client.delete(
            f"/api/events/{other_event['id']}/media/{copied_id}", headers=mallory.headers
        )
        assert response.status_code == 200
        assert stored.is_file()

        response = await test_client.get(media["url"], headers=alice.headers)
        assert response.status_code == 200
