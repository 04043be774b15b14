import uuid

import pytest


@pytest.fixture
def listing(owner, make_property):
    return make_property(owner)


@pytest.fixture
def open_chat(client, listing, owner, buyer, headers_for):
    def _open(property_id=None, seeker=None, lister=None):
        seeker = seeker or buyer
        lister = lister or owner
        return client.post(
            "/api/chats",
            json={"propertyId": str(property_id or listing.id), "ownerId": str(lister.id)},
            headers=headers_for(seeker),
        )

    return _open


class TestCreateChat:
    def test_created_then_returned(self, open_chat, listing, owner, buyer):
        first = open_chat()
        second = open_chat()

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["isNew"] is True
        assert second.json()["isNew"] is False
        assert first.json()["chat"]["id"] == second.json()["chat"]["id"]

        chat = first.json()["chat"]
        assert chat["propertyId"] == str(listing.id)
        assert chat["property"]["title"] == "Sunny 3BHK"
        assert chat["messages"] == []
        assert chat["lastMessage"] is None
        assert sorted(p["id"] for p in chat["participants"]) == sorted([str(owner.id), str(buyer.id)])

    def test_lister_opening_the_same_pair_gets_the_same_chat(
        self, client, open_chat, listing, owner, buyer, headers_for,
    ):
        chat_id = open_chat().json()["chat"]["id"]

        res = client.post(
            "/api/chats",
            json={"propertyId": str(listing.id), "ownerId": str(buyer.id)},
            headers=headers_for(owner),
        )

        assert res.status_code == 200
        assert res.json()["chat"]["id"] == chat_id

    def test_unknown_property(self, open_chat):
        res = open_chat(property_id=uuid.uuid4())
        assert res.status_code == 404
        assert res.json() == {"success": False, "message": "Property not found"}

    def test_malformed_body(self, client, buyer, headers_for):
        res = client.post("/api/chats", json={"propertyId": "nope"}, headers=headers_for(buyer))
        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_requires_authentication(self, client, listing, owner):
        res = client.post("/api/chats", json={"propertyId": str(listing.id), "ownerId": str(owner.id)})
        assert res.status_code == 401
        assert res.json() == {"success": False, "message": "Not authorized, no valid token"}


class TestMessages:
    def test_send_updates_thread_and_inquiries(self, client, db, open_chat, listing, owner, buyer, headers_for):
        chat_id = open_chat().json()["chat"]["id"]

        client.post(f"/api/chats/{chat_id}/messages", json={"text": "  Still available?  "}, headers=headers_for(buyer))
        res = client.post(f"/api/chats/{chat_id}/messages", json={"text": "Yes"}, headers=headers_for(owner))

        assert res.status_code == 200
        chat = res.json()["chat"]
        assert [m["text"] for m in chat["messages"]] == ["Still available?", "Yes"]
        assert [m["senderId"] for m in chat["messages"]] == [str(buyer.id), str(owner.id)]
        assert chat["messages"][0]["sender"]["name"] == "Bea Buyer"
        assert chat["lastMessage"] == "Yes"

        db.refresh(listing)
        assert listing.inquiries == 2

    def test_blank_text_is_rejected(self, client, open_chat, buyer, headers_for):
        chat_id = open_chat().json()["chat"]["id"]

        res = client.post(f"/api/chats/{chat_id}/messages", json={"text": "   "}, headers=headers_for(buyer))

        assert res.status_code == 400
        assert "Message text is required" in res.json()["message"]

    def test_stranger_cannot_read_or_write(self, client, open_chat, make_user, headers_for):
        chat_id = open_chat().json()["chat"]["id"]
        stranger = headers_for(make_user())

        assert client.get(f"/api/chats/{chat_id}", headers=stranger).status_code == 403
        assert client.post(
            f"/api/chats/{chat_id}/messages", json={"text": "hi"}, headers=stranger,
        ).status_code == 403
        assert client.put(f"/api/chats/{chat_id}/read", headers=stranger).status_code == 403

    def test_unknown_chat(self, client, buyer, headers_for):
        assert client.get(f"/api/chats/{uuid.uuid4()}", headers=headers_for(buyer)).status_code == 404


def test_mark_read_flags_incoming_messages(client, open_chat, owner, buyer, headers_for):
    chat_id = open_chat().json()["chat"]["id"]
    client.post(f"/api/chats/{chat_id}/messages", json={"text": "hi"}, headers=headers_for(buyer))
    client.post(f"/api/chats/{chat_id}/messages", json={"text": "hello"}, headers=headers_for(owner))

    res = client.put(f"/api/chats/{chat_id}/read", headers=headers_for(owner))

    assert res.json() == {"success": True, "message": "Messages marked as read"}
    chat = client.get(f"/api/chats/{chat_id}", headers=headers_for(owner)).json()["chat"]
    assert {m["text"]: m["read"] for m in chat["messages"]} == {"hi": True, "hello": False}


def test_list_is_scoped_to_participant_and_sorted(
    client, open_chat, owner, buyer, make_user, make_property, headers_for,
):
    other = make_property(owner, title="Other")
    first = open_chat().json()["chat"]["id"]
    second = open_chat(property_id=other.id).json()["chat"]["id"]
    open_chat(seeker=make_user())

    client.post(f"/api/chats/{first}/messages", json={"text": "bump"}, headers=headers_for(buyer))

    body = client.get("/api/chats", headers=headers_for(buyer)).json()
    assert body["success"] is True
    assert [c["id"] for c in body["chats"]] == [first, second]
    assert len(client.get("/api/chats", headers=headers_for(owner)).json()["chats"]) == 3


def test_chat_outlives_its_property(client, open_chat, listing, owner, buyer, headers_for):
    chat_id = open_chat().json()["chat"]["id"]
    client.delete(f"/api/properties/{listing.id}", headers=headers_for(owner))

    res = client.get(f"/api/chats/{chat_id}", headers=headers_for(buyer))

    assert res.status_code == 200
    assert res.json()["chat"]["property"] is None
    assert res.json()["chat"]["propertyId"] == str(listing.id)
