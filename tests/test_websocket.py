"""Live snapshot stream tests"""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from fellowship.services.database_service import POSTS, timestamp

from tests.factories import setup_request, signup_request


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_token(client) -> str:
    assert client.post("/setup", json=setup_request()).status_code == 201
    body = setup_request()["super_admin"]
    response = client.post("/auth/login", json={"email": body["email"], "password": body["password"]})
    return response.json()["access_token"]


@pytest.fixture
def family_id(client, admin_token) -> str:
    response = client.post(
        "/families", json={"name": "Grace Family"}, headers={"Authorization": f"Bearer {admin_token}"}
    )
    return response.json()["id"]


@pytest.fixture
def member(client, family_id) -> dict:
    """Session of a member signed up into the family"""
    response = client.post("/auth/signup", json=signup_request(display_name="Ruth", family_id=family_id))
    assert response.status_code == 201
    return response.json()


def receive_snapshots(ws, count: int) -> dict:
    snapshots = {}
    for _ in range(count):
        message = ws.receive_json()
        assert message["type"] == "snapshot"
        snapshots[message["collection"]] = message["documents"]
    return snapshots


class TestFamilyStream:
    """/ws/families/{family_id}"""

    def test_initial_snapshots(self, client, family_id, member):
        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            first = [ws.receive_json() for _ in range(4)]

        assert [m["collection"] for m in first] == ["members", "posts", "media", "notifications"]
        assert [u["id"] for u in first[0]["documents"]] == [member["user"]["id"]]
        assert first[1]["documents"] == []

    def test_post_pushes_snapshot(self, client, family_id, member):
        headers = {"Authorization": f"Bearer {member['access_token']}"}

        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            receive_snapshots(ws, 4)

            response = client.post(f"/families/{family_id}/posts", json={"content": "Hello"}, headers=headers)
            assert response.status_code == 201

            message = ws.receive_json()

        assert message["collection"] == "posts"
        assert [p["content"] for p in message["documents"]] == ["Hello"]

    def test_other_family_writes_are_filtered(self, app, client, family_id, member):
        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            receive_snapshots(ws, 4)

            app.state.store.create(POSTS, {
                "family_id": "elsewhere", "author_id": "x", "author_name": "X",
                "content": "Not here", "type": "discussion", "created_at": timestamp(),
                "likes": [], "comments": []
            })
            message = ws.receive_json()

        assert message["collection"] == "posts"
        assert message["documents"] == []

    def test_ping(self, client, family_id, member):
        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            receive_snapshots(ws, 4)
            ws.send_json({"type": "ping"})

            assert ws.receive_json() == {"type": "pong"}

    def test_disconnect_releases_subscriptions(self, app, client, family_id, member):
        store = app.state.store
        before = store.subscription_count

        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            receive_snapshots(ws, 4)
            assert store.subscription_count == before + 4

        assert store.subscription_count == before

    def test_leaving_closes_stream(self, client, family_id, member, admin_token):
        member_headers = {"Authorization": f"Bearer {member['access_token']}"}
        admin_headers = {"Authorization": f"Bearer {admin_token}"}

        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            receive_snapshots(ws, 4)

            assert client.post("/families/leave", headers=member_headers).status_code == 200
            client.post(f"/families/{family_id}/posts", json={"content": "After leaving"}, headers=admin_headers)

            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 4003

    def test_removed_member_stream_closes(self, client, family_id, member, admin_token):
        admin_headers = {"Authorization": f"Bearer {admin_token}"}

        with client.websocket_connect(f"/ws/families/{family_id}?token={member['access_token']}") as ws:
            receive_snapshots(ws, 4)

            response = client.delete(f"/families/{family_id}/members/{member['user']['id']}", headers=admin_headers)
            assert response.status_code == 200

            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 4003

    def test_bad_token(self, client, family_id, admin_token):
        with client.websocket_connect(f"/ws/families/{family_id}?token=not-a-jwt") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 4001

    def test_outsider_is_refused(self, client, family_id, admin_token):
        outsider = client.post("/auth/signup", json=signup_request()).json()

        with client.websocket_connect(f"/ws/families/{family_id}?token={outsider['access_token']}") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 4003


class TestOtherStreams:
    """/ws/me and /ws/admin-requests"""

    def test_profile_stream(self, client, member):
        headers = {"Authorization": f"Bearer {member['access_token']}"}

        with client.websocket_connect(f"/ws/me?token={member['access_token']}") as ws:
            first = ws.receive_json()
            client.put("/users/me", json={"display_name": "Ruth B."}, headers=headers)
            second = ws.receive_json()

        assert first["collection"] == "me"
        assert first["documents"][0]["display_name"] == "Ruth"
        assert second["documents"][0]["display_name"] == "Ruth B."

    def test_admin_request_stream(self, client, admin_token, member):
        headers = {"Authorization": f"Bearer {member['access_token']}"}

        with client.websocket_connect(f"/ws/admin-requests?token={admin_token}") as ws:
            assert ws.receive_json()["documents"] == []
            client.post("/admin-requests", json={"reason": "I lead worship"}, headers=headers)
            message = ws.receive_json()

        assert [r["user_id"] for r in message["documents"]] == [member["user"]["id"]]

    def test_admin_request_stream_requires_super_admin(self, client, member):
        with client.websocket_connect(f"/ws/admin-requests?token={member['access_token']}") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 4003
