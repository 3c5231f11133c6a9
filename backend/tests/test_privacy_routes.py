"""
FamilyEvents Backend — Privacy Override Route Tests
===================================================

What:  /api/events/{id}/privacy. Only the event creator writes overrides;
       any member who can see the event can read them.
"""

import uuid

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def event_setup(api, create_user):
    alice = await create_user("alice@example.com")
    bob = await create_user("bob@example.com")
    carol = await create_user("carol@example.com")
    family = await api.create_family(alice)
    await api.add_member(alice, family["id"], bob)
    await api.add_member(alice, family["id"], carol)
    event = await api.create_event(alice, family["id"])
    return alice, bob, carol, event


class TestSetPrivacy:

    @pytest.mark.asyncio
    async def test_create_then_replace(self, test_client, event_setup):
        alice, bob, _, event = event_setup
        url = f"/api/events/{event['id']}/privacy"

        response = await test_client.post(
            url, json={"user_id": str(bob.id), "can_upload_media": False}, headers=alice.headers
        )
        assert response.status_code == 201
        created = response.json()
        assert created["can_view"] is True
        assert created["can_upload_media"] is False
        assert created["user"]["email"] == "bob@example.com"

        response = await test_client.post(
            url, json={"user_id": str(bob.id), "can_edit": True}, headers=alice.headers
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["id"] == created["id"]
        assert updated["can_edit"] is True
        assert updated["can_upload_media"] is True

        response = await test_client.get(url, headers=alice.headers)
        assert len(response.json()["privacy"]) == 1

    @pytest.mark.asyncio
    async def test_contributor_with_invite_cannot_set(self, test_client, api, event_setup):
        alice, bob, carol, event = event_setup
        await api.add_contributor(alice, event["id"], bob, can_invite=True, can_delete=True)
        response = await test_client.post(
            f"/api/events/{event['id']}/privacy",
            json={"user_id": str(carol.id), "can_view": False},
            headers=bob.headers,
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_family_admin_cannot_set_on_others_event(self, test_client, api, event_setup):
        alice, bob, carol, event = event_setup
        bobs_event = await api.create_event(bob, event["family_id"], title="Bob's")
        response = await test_client.post(
            f"/api/events/{bobs_event['id']}/privacy",
            json={"user_id": str(carol.id), "can_view": False},
            headers=alice.headers,
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client, event_setup):
        alice, _, _, event = event_setup
        response = await test_client.post(
            f"/api/events/{event['id']}/privacy",
            json={"user_id": str(uuid.uuid4())},
            headers=alice.headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_upload_revoked_for_contributor(self, test_client, api, event_setup):
        alice, bob, _, event = event_setup
        await api.add_contributor(alice, event["id"], bob)
        await test_client.post(
            f"/api/events/{event['id']}/privacy",
            json={"user_id": str(bob.id), "can_upload_media": False},
            headers=alice.headers,
        )
        response = await test_client.post(
            f"/api/events/{event['id']}/media",
            json={
                "filename": "a.jpg",
                "original_name": "a.jpg",
                "mime_type": "image/jpeg",
                "size": 10,
            },
            headers=bob.headers,
        )
        assert response.status_code == 403


class TestDeletePrivacy:

    @pytest.mark.asyncio
    async def test_creator_deletes_and_access_returns(self, test_client, event_setup):
        alice, bob, _, event = event_setup
        url = f"/api/events/{event['id']}/privacy"
        await test_client.post(
            url, json={"user_id": str(bob.id), "can_view": False}, headers=alice.headers
        )
        response = await test_client.get(f"/api/events/{event['id']}", headers=bob.headers)
        assert response.status_code == 403

        response = await test_client.delete(f"{url}/{bob.id}", headers=alice.headers)
        assert response.status_code == 200

        response = await test_client.get(f"/api/events/{event['id']}", headers=bob.headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_override_is_404_before_403(self, test_client, event_setup):
        _, bob, carol, event = event_setup
        response = await test_client.delete(
            f"/api/events/{event['id']}/privacy/{carol.id}", headers=bob.headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_creator_cannot_delete(self, test_client, event_setup):
        alice, bob, carol, event = event_setup
        await test_client.post(
            f"/api/events/{event['id']}/privacy",
            json={"user_id": str(carol.id), "can_comment": False},
            headers=alice.headers,
        )
        response = await test_client.delete(
            f"/api/events/{event['id']}/privacy/{carol.id}", headers=bob.headers
        )
        assert response.status_code == 403
