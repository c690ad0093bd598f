from collabdocs import __version__
from collabdocs.database.seed import DEFAULT_COMMANDS


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["version"] == __version__


def test_ready(client):
    response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_not_ready_without_database(client, database, monkeypatch):
    monkeypatch.setattr(database, "check_connection", lambda: False)

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
    assert response.json()["database"] == "unreachable"


def test_root(client):
    assert client.get("/").json()["documentation"] == "/docs"


def test_security_and_request_id_headers(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Response-Time" in response.headers


def test_db_connectivity(client):
    assert client.get("/api/db/test").json() == {"result": {"success": 1}}


def test_wipe_rejects_wrong_secret(alice):
    client, _ = alice
    client.post("/api/document", json={"name": "Keep me"})

    for params in ({}, {"secret": "guess"}):
        response = client.get("/api/db/wipe", params=params)
        assert response.status_code == 403
        assert response.json()["error"] == "migration_key_error"

    assert len(client.get("/api/document").json()) == 1


def test_wipe_recreates_and_reseeds(alice):
    client, _ = alice
    client.post("/api/document", json={"name": "Gone soon"})

    response = client.get("/api/db/wipe", params={"secret": "wipe-me"})

    assert response.status_code == 200
    assert response.json()["result"]["success"] is True
    assert client.get("/api/document").json() == []
    assert len(client.get("/api/command/default").json()) == len(DEFAULT_COMMANDS)
