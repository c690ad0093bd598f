def _project(client, name="Thesis", description=None):
    response = client.post("/api/project", json={"name": name, "description": description})
    assert response.status_code == 200, response.text
    return response.json()


def _document(client, name="Chapter"):
    return client.post("/api/document", json={"name": name, "content": f"{name} text"}).json()


def test_create_list_update(alice):
    client, user_id = alice
    project = _project(client, description="PhD work")

    assert project["owner_id"] == user_id
    assert project["description"] == "PhD work"
    assert [p["id"] for p in client.get("/api/project").json()] == [project["id"]]

    response = client.put(f"/api/project/{project['id']}", json={"name": "Thesis v2"})
    assert response.json()["result"]["project"]["name"] == "Thesis v2"


def test_default_name(alice):
    client, _ = alice
    assert client.post("/api/project", json={}).json()["name"] == "Untitled Project"


def test_membership(alice):
    client, _ = alice
    project = _project(client)
    first = _document(client, "One")
    second = _document(client, "Two")

    client.post(f"/api/project/{project['id']}/documents/{first['id']}")
    client.post(f"/api/project/{project['id']}/documents/{second['id']}")
    assert [d["id"] for d in client.get(f"/api/project/{project['id']}/documents").json()] == [first["id"], second["id"]]

    client.delete(f"/api/project/{project['id']}/documents/{first['id']}")
    assert [d["id"] for d in client.get(f"/api/project/{project['id']}/documents").json()] == [second["id"]]

    assert client.delete(f"/api/project/{project['id']}/documents/{first['id']}").status_code == 404


def test_document_moves_between_projects(alice):
    client, _ = alice
    old = _project(client, "Old")
    new = _project(client, "New")
    document = _document(client)

    client.post(f"/api/project/{old['id']}/documents/{document['id']}")
    client.post(f"/api/project/{new['id']}/documents/{document['id']}")

    assert client.get(f"/api/project/{old['id']}/documents").json() == []
    assert client.get(f"/api/document/{document['id']}/project").json()["project_id"] == new["id"]


def test_adding_needs_document_editor(alice, bob):
    client, _ = alice
    bob_client, bob_id = bob
    project = _project(client)
    client.post(f"/api/project/{project['id']}/permissions", json={"user_id": bob_id, "role": "editor"})

    bobs_doc = _document(bob_client, "Bob's")
    alices_doc = _document(client, "Alice's")

    assert bob_client.post(f"/api/project/{project['id']}/documents/{bobs_doc['id']}").status_code == 200
    assert bob_client.post(f"/api/project/{project['id']}/documents/{alices_doc['id']}").status_code == 403


def test_delete_refuses_non_empty(alice):
    client, _ = alice
    project = _project(client)
    document = _document(client)
    client.post(f"/api/project/{project['id']}/documents/{document['id']}")

    response = client.delete(f"/api/project/{project['id']}")

    assert response.status_code == 409
    assert response.json()["error"] == "project_not_empty"


def test_delete_empty(alice):
    client, _ = alice
    project = _project(client)

    assert client.delete(f"/api/project/{project['id']}").status_code == 200
    assert client.get(f"/api/project/{project['id']}").status_code == 404


def test_force_delete_keeps_other_users_documents(alice, bob):
    client, _ = alice
    bob_client, bob_id = bob
    project = _project(client)
    client.post(f"/api/project/{project['id']}/permissions", json={"user_id": bob_id, "role": "editor"})

    mine = _document(client, "Mine")
    theirs = _document(bob_client, "Theirs")
    client.post(f"/api/project/{project['id']}/documents/{mine['id']}")
    bob_client.post(f"/api/project/{project['id']}/documents/{theirs['id']}")

    response = client.delete(f"/api/project/{project['id']}/force")

    assert response.json()["result"] == {"success": True, "deleted_documents": 1, "unlinked_documents": 1}
    assert client.get(f"/api/document/{mine['id']}").status_code == 404
    assert bob_client.get(f"/api/document/{theirs['id']}").status_code == 200
    assert bob_client.get(f"/api/document/{theirs['id']}/project").json()["project_id"] is None


def test_sharing_and_roles(alice, bob):
    client, _ = alice
    bob_client, bob_id = bob
    project = _project(client)

    assert bob_client.get(f"/api/project/{project['id']}").status_code == 403

    client.post(f"/api/project/{project['id']}/permissions", json={"user_id": bob_id, "role": "viewer"})
    assert bob_client.get(f"/api/project/{project['id']}").status_code == 200
    assert bob_client.put(f"/api/project/{project['id']}", json={"name": "x"}).status_code == 403
    assert bob_client.delete(f"/api/project/{project['id']}").status_code == 403
    assert [p["id"] for p in bob_client.get("/api/project/shared").json()] == [project["id"]]

    client.delete(f"/api/project/{project['id']}/permissions/{bob_id}")
    assert bob_client.get(f"/api/project/{project['id']}").status_code == 403


def test_star_and_trash(alice):
    client, _ = alice
    project = _project(client)

    assert client.put(f"/api/project/{project['id']}/star").json()["result"]["is_starred"] is True
    assert [p["id"] for p in client.get("/api/project/starred").json()] == [project["id"]]

    client.put(f"/api/project/{project['id']}/trash")
    assert client.get("/api/project/starred").json() == []
    assert [p["id"] for p in client.get("/api/project/trash").json()] == [project["id"]]

    client.put(f"/api/project/{project['id']}/restore")
    assert client.get("/api/project/trash").json() == []
