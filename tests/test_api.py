import time

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from app.configs.settings import settings
from app.configs.setup import create_app
from app.models import User
from app.services import get_blob_store
from app.utils.verify_token import get_current_user

API = "/api/v1"


@pytest.fixture
def app(user, blob_store):
    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _create_folder(client, name, parent_id=None):
    response = await client.post(f"{API}/folders", json={"name": name, "parent_id": parent_id})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _upload(client, name, data=b"hello", **form):
    response = await client.post(
        f"{API}/files/upload",
        files={"file": (name, data, "text/plain")},
        data=form,
    )
    return response


async def test_folder_lifecycle(client):
    docs = await _create_folder(client, "Docs")
    sub = await _create_folder(client, "Sub", docs["id"])
    assert sub["path"] == [docs["id"]]

    response = await client.post(f"{API}/folders", json={"name": "Sub", "parent_id": docs["id"]})
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"
    assert response.json()["success"] is False

    tree = (await client.get(f"{API}/folders/{docs['id']}/tree")).json()["data"]
    assert tree["children"][0]["name"] == "Sub"

    forest = (await client.get(f"{API}/folders/tree")).json()["data"]
    assert [t["name"] for t in forest] == ["Docs"]

    path = (await client.get(f"{API}/folders/{sub['id']}/path")).json()["data"]
    assert [p["name"] for p in path["path"]] == ["Docs"]

    children = (await client.get(f"{API}/folders/{docs['id']}/children")).json()["data"]
    assert [c["id"] for c in children] == [sub["id"]]

    moved = (await client.put(f"{API}/folders/{sub['id']}/move", json={"new_parent_id": None})).json()["data"]
    assert moved["path"] == []

    response = await client.put(f"{API}/folders/{docs['id']}/rename", json={"name": "Papers"})
    assert response.json()["data"]["name"] == "Papers"

    response = await client.delete(f"{API}/folders/{docs['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["deleted_folders"] == 1

    response = await client.get(f"{API}/folders/{docs['id']}")
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


async def test_list_roots_of_another_user_is_forbidden(client, user, other_user):
    response = await client.get(f"{API}/folders/user/{other_user.id}")
    assert response.status_code == 403

    response = await client.get(f"{API}/folders/user/{user.id}")
    assert response.status_code == 200
    assert response.json()["data"] == []


async def test_move_into_descendant_is_bad_request(client):
    a = await _create_folder(client, "A")
    b = await _create_folder(client, "B", a["id"])

    response = await client.put(f"{API}/folders/{a['id']}/move", json={"new_parent_id": b["id"]})
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_argument"


async def test_upload_and_file_routes(client, blob_store, user):
    folder = await _create_folder(client, "Docs")

    response = await _upload(client, "notes.txt", folder_id=folder["id"], tags="work, q3")
    assert response.status_code == 201, response.text
    uploaded = response.json()["data"]
    assert "url" not in uploaded and "object_name" not in uploaded
    assert uploaded["file_type"] == "document"

    duplicate = await _upload(client, "notes.txt", folder_id=folder["id"])
    assert duplicate.status_code == 409

    file = (await client.get(f"{API}/files/{uploaded['id']}")).json()["data"]
    assert sorted(file["tags"]) == ["q3", "work"]

    listed = (await client.get(f"{API}/files/folder/{folder['id']}")).json()["data"]
    assert [f["id"] for f in listed] == [uploaded["id"]]

    by_tag = (await client.get(f"{API}/files/search/tag", params={"tag": "WOR"})).json()["data"]
    assert [f["name"] for f in by_tag] == ["notes.txt"]

    by_size = await client.get(f"{API}/files/filter/size", params={"min_size": 100, "max_size": 50})
    assert by_size.status_code == 400

    by_type = await client.get(f"{API}/files/filter/type/document")
    assert len(by_type.json()["data"]) == 1

    download = (await client.get(f"{API}/files/{uploaded['id']}/download")).json()["data"]
    assert download["url"].startswith("https://blobs.test/")

    tagged = await client.put(f"{API}/files/{uploaded['id']}/tags", json={"tags": ["extra"]})
    assert "extra" in tagged.json()["data"]["tags"]
    untagged = await client.request("DELETE", f"{API}/files/{uploaded['id']}/tags", json={"tags": ["extra"]})
    assert "extra" not in untagged.json()["data"]["tags"]

    renamed = await client.put(f"{API}/files/{uploaded['id']}", json={"name": "renamed.txt"})
    assert renamed.json()["data"]["name"] == "renamed.txt"

    owned = (await client.get(f"{API}/files/owner/{user.id}")).json()["data"]
    assert len(owned) == 1

    deleted = await client.delete(f"{API}/files/{uploaded['id']}")
    assert deleted.status_code == 200
    assert len(blob_store.delete_calls) == 1

    activities = (await client.get(f"{API}/activities/file/{uploaded['id']}")).json()["data"]
    assert [a["action"] for a in activities] == ["delete", "rename", "download", "upload"]


async def test_upload_storage_failure_is_bad_gateway(client, blob_store):
    blob_store.fail_put = True
    response = await _upload(client, "a.txt")
    assert response.status_code == 502
    assert response.json()["code"] == "upload_failed"


async def test_bulk_routes(client):
    target = await _create_folder(client, "Target")
    a = (await _upload(client, "a.txt")).json()["data"]
    b = (await _upload(client, "b.txt")).json()["data"]

    moved = await client.put(f"{API}/files/bulk-move", json={"file_ids": [a["id"], b["id"]], "new_folder_id": target["id"]})
    assert moved.json()["data"]["moved"] == 2

    again = await client.put(f"{API}/files/bulk-move", json={"file_ids": [a["id"]], "new_folder_id": target["id"]})
    assert again.status_code == 404
    assert again.json()["code"] == "no_op"

    deleted = await client.post(
        f"{API}/files/bulk-delete", json={"file_ids": [a["id"], b["id"], "665f1c2b9a1e4b7d2c3f4a51"]}
    )
    assert deleted.json()["data"] == {"requested": 3, "deleted": 2}

    empty = await client.post(f"{API}/files/bulk-delete", json={"file_ids": []})
    assert empty.status_code == 400


async def test_tag_routes(client):
    created = await client.post(f"{API}/tags", json={"name": "work"})
    assert created.status_code == 201
    tag_id = created.json()["data"]["id"]

    assert (await client.post(f"{API}/tags", json={"name": "work"})).status_code == 409
    assert [t["name"] for t in (await client.get(f"{API}/tags")).json()["data"]] == ["work"]
    assert (await client.get(f"{API}/tags/search", params={"q": "zzz"})).json()["data"] == []

    renamed = await client.put(f"{API}/tags/{tag_id}", json={"name": "job"})
    assert renamed.json()["data"]["name"] == "job"

    assert (await client.delete(f"{API}/tags/{tag_id}")).status_code == 200
    assert (await client.get(f"{API}/tags/{tag_id}")).status_code == 404


async def test_me_and_recent_activity(client, user):
    me = (await client.get(f"{API}/users/me")).json()["data"]
    assert me["username"] == "alice"

    folder = await _create_folder(client, "A")
    await client.put(f"{API}/folders/{folder['id']}/rename", json={"name": "B"})
    recent = (await client.get(f"{API}/activities/recent", params={"limit": 5})).json()["data"]
    assert [a["action"] for a in recent] == ["rename"]


async def test_request_validation_error_envelope(client):
    response = await client.post(f"{API}/folders", json={})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["errors"][0]["field"] == "name"


async def test_bearer_token_provisions_user(blob_store, monkeypatch):
    secret = "a-test-secret-that-is-long-enough-for-hs256"
    monkeypatch.setattr(settings, "JWT_SECRET", secret)
    app = create_app()
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    token = jwt.encode(
        {"sub": "auth|carol", "email": "carol@example.com", "exp": int(time.time()) + 60},
        secret,
        algorithm="HS256",
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        missing = await client.get(f"{API}/users/me")
        assert missing.status_code in (401, 403)

        invalid = await client.get(f"{API}/users/me", headers={"Authorization": "Bearer not-a-token"})
        assert invalid.status_code == 401

        response = await client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["data"]["username"] == "carol"

        await client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})

    assert await User.find({"subject": "auth|carol"}).count() == 1
