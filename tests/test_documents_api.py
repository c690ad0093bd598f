from datetime import datetime, timedelta

from collabdocs.database.models import Document
from collabdocs.services.document_service import needs_embedding_refresh


def _create(client, name="Essay", content="Some words"):
    response = client.post("/api/document", json={"name": name, "content": content})
    assert response.status_code == 200, response.text
    return response.json()


# ============= CRUD =============


def test_create_and_read(alice):
    client, user_id = alice

    document = _create(client)

    assert document["name"] == "Essay"
    assert document["owner_id"] == user_id
    assert client.get(f"/api/document/{document['id']}").json()["content"] == "Some words"
    assert [d["id"] for d in client.get("/api/document").json()] == [document["id"]]


def test_create_defaults_name(alice):
    client, _ = alice
    response = client.post("/api/document", json={})
    assert response.json()["name"] == "Untitled Document"


def test_create_respects_client_timestamps(alice):
    client, _ = alice
    response = client.post(
        "/api/document",
        json={"name": "Old", "created_at": "2024-01-02T03:04:05Z", "updated_at": "2024-01-02T03:04:05Z"},
    )
    assert response.json()["created_at"].startswith("2024-01-02T03:04:05")


def test_document_limit(alice):
    client, _ = alice
    for i in range(3):
        _create(client, name=f"Doc {i}")

    response = client.post("/api/document", json={"name": "One too many"})

    assert response.status_code == 403
    assert response.json()["error"] == "limit_exceeded"


def test_update_and_delete(alice):
    client, _ = alice
    document = _create(client)

    response = client.put(f"/api/document/{document['id']}", json={"name": "Renamed", "content": "New"})
    assert response.json() == {"result": {"success": True}}
    assert client.get(f"/api/document/{document['id']}").json()["name"] == "Renamed"

    assert client.delete(f"/api/document/{document['id']}").status_code == 200
    assert client.get(f"/api/document/{document['id']}").status_code == 404


def test_missing_document_is_404(alice):
    client, _ = alice
    assert client.get("/api/document/12345").status_code == 404


# ============= permissions =============


def test_stranger_is_forbidden(alice, bob):
    client, _ = alice
    bob_client, _ = bob
    document = _create(client)

    response = bob_client.get(f"/api/document/{document['id']}")

    assert response.status_code == 403
    assert response.json()["error"] == "permission_error"


def test_viewer_can_read_but_not_edit(alice, bob):
    client, _ = alice
    bob_client, bob_id = bob
    document = _create(client)

    grant = client.post(f"/api/document/{document['id']}/permissions", json={"user_id": bob_id, "role": "viewer"})
    assert grant.json() == {"document_id": document["id"], "user_id": bob_id, "role": "viewer"}

    assert bob_client.get(f"/api/document/{document['id']}").status_code == 200
    assert bob_client.put(f"/api/document/{document['id']}", json={"content": "hack"}).status_code == 403
    assert [d["id"] for d in bob_client.get("/api/document/shared").json()] == [document["id"]]


def test_editor_cannot_delete_or_share(alice, bob, new_user):
    client, _ = alice
    bob_client, bob_id = bob
    _, carol_id = new_user("Carol")
    document = _create(client)
    client.post(f"/api/document/{document['id']}/permissions", json={"user_id": bob_id, "role": "editor"})

    assert bob_client.put(f"/api/document/{document['id']}", json={"content": "edit"}).status_code == 200
    assert bob_client.delete(f"/api/document/{document['id']}").status_code == 403
    assert bob_client.post(
        f"/api/document/{document['id']}/permissions", json={"user_id": carol_id, "role": "viewer"}
    ).status_code == 403


def test_list_and_remove_permissions(alice, bob):
    client, user_id = alice
    bob_client, bob_id = bob
    document = _create(client)
    client.post(f"/api/document/{document['id']}/permissions", json={"user_id": bob_id, "role": "viewer"})

    entries = client.get(f"/api/document/{document['id']}/permissions").json()
    assert {(e["user_id"], e["role"]) for e in entries} == {(user_id, "owner"), (bob_id, "viewer")}
    assert entries[0]["email"] == "alice@example.com"

    response = client.delete(f"/api/document/{document['id']}/permissions/{bob_id}")
    assert response.json()["result"]["success"] is True
    assert bob_client.get(f"/api/document/{document['id']}").status_code == 403


def test_invalid_role_and_unknown_user(alice, bob):
    client, _ = alice
    _, bob_id = bob
    document = _create(client)

    bad_role = client.post(f"/api/document/{document['id']}/permissions", json={"user_id": bob_id, "role": "admin"})
    assert bad_role.status_code == 400

    unknown = client.post(f"/api/document/{document['id']}/permissions", json={"user_id": 999, "role": "viewer"})
    assert unknown.status_code == 404


def test_ownership_transfer(alice, bob):
    client, user_id = alice
    bob_client, bob_id = bob
    document = _create(client)

    response = client.put(f"/api/document/{document['id']}/permissions", json={"user_id": bob_id, "role": "owner"})
    assert response.status_code == 200

    assert bob_client.get(f"/api/document/{document['id']}").json()["owner_id"] == bob_id
    roles = {e["user_id"]: e["role"] for e in bob_client.get(f"/api/document/{document['id']}/permissions").json()}
    assert roles == {user_id: "editor", bob_id: "owner"}


def test_last_owner_cannot_be_removed(alice):
    client, user_id = alice
    document = _create(client)

    response = client.delete(f"/api/document/{document['id']}/permissions/{user_id}")
    assert response.status_code == 400


# ============= star / trash / project =============


def test_star_toggle_and_listing(alice):
    client, _ = alice
    document = _create(client)

    starred = client.put(f"/api/document/{document['id']}/star").json()["result"]
    assert starred["is_starred"] is True
    assert [d["id"] for d in client.get("/api/document/starred").json()] == [document["id"]]

    assert client.put(f"/api/document/{document['id']}/star").json()["result"]["is_starred"] is False
    assert client.get("/api/document/starred").json() == []


def test_trash_and_restore(alice):
    client, _ = alice
    document = _create(client)
    client.put(f"/api/document/{document['id']}/star")

    client.put(f"/api/document/{document['id']}/trash")
    assert [d["id"] for d in client.get("/api/document/trash").json()] == [document["id"]]
    assert client.get("/api/document/starred").json() == []

    client.put(f"/api/document/{document['id']}/restore")
    assert client.get("/api/document/trash").json() == []


def test_document_project_lookup(alice):
    client, _ = alice
    document = _create(client)

    assert client.get(f"/api/document/{document['id']}/project").json() == {"project_id": None, "project_name": None}

    project = client.post("/api/project", json={"name": "Thesis"}).json()
    client.post(f"/api/project/{project['id']}/documents/{document['id']}")

    assert client.get(f"/api/document/{document['id']}/project").json() == {
        "project_id": project["id"],
        "project_name": "Thesis",
    }


# ============= embeddings =============


def test_create_embeds_in_background(alice, database, fake_embedder):
    client, _ = alice
    document = _create(client, content="background embedding please")

    with database.get_session() as session:
        stored = session.get(Document, document["id"])
        assert stored.embedding is not None
        assert stored.embedding_content_length == len("background embedding please")

    assert fake_embedder.calls[-1] == ("background embedding please", "retrieval_document")


def test_embedding_failure_does_not_fail_the_save(alice, database, fake_embedder):
    client, _ = alice
    fake_embedder.fail = True

    document = _create(client, content="unlucky")
    response = client.put(f"/api/document/{document['id']}", json={"content": "still unlucky"})

    assert response.status_code == 200
    with database.get_session() as session:
        assert session.get(Document, document["id"]).embedding is None


def test_needs_embedding_refresh_rules():
    now = datetime(2024, 1, 1, 12, 0)
    window = timedelta(minutes=20)

    fresh = Document(content="a" * 100, embedding=[0.0] * 8, embedding_updated_at=now, embedding_content_length=100)
    assert not needs_embedding_refresh(fresh, now, min_change_chars=500, refresh_after=window)

    grown = Document(content="a" * 700, embedding=[0.0] * 8, embedding_updated_at=now, embedding_content_length=100)
    assert needs_embedding_refresh(grown, now, min_change_chars=500, refresh_after=window)

    assert needs_embedding_refresh(fresh, now + timedelta(minutes=21), min_change_chars=500, refresh_after=window)

    never = Document(content="text")
    assert needs_embedding_refresh(never, now, min_change_chars=500, refresh_after=window)

    empty = Document(content="   ")
    assert not needs_embedding_refresh(empty, now, min_change_chars=500, refresh_after=window)
