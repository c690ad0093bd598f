from collabdocs.database.seed import DEFAULT_COMMANDS


def _command_id(client, name):
    commands = client.get("/api/command/default").json()
    return next(c["command_id"] for c in commands if c["command_name"] == name)


def test_defaults_are_seeded(alice):
    client, _ = alice

    commands = client.get("/api/command/default").json()

    assert len(commands) == len(DEFAULT_COMMANDS)
    move_left = next(c for c in commands if c["command_name"] == "moveLeft")
    assert move_left["default_keybinding"] == "h"


def test_default_command_ids_are_stable(alice):
    client, _ = alice

    commands = {c["command_id"]: c for c in client.get("/api/command/default").json()}

    assert [commands[i]["command_name"] for i in range(1, 9)] == [
        "bold", "italic", "underline", "openColorPicker",
        "moveLeft", "moveRight", "moveUp", "moveDown",
    ]
    assert [commands[i]["command_name"] for i in range(9, 18)] == [f"switchToDocument{n}" for n in range(1, 10)]
    assert commands[1]["default_keybinding"] == "Ctrl+B"
    assert commands[17]["default_keybinding"] == "Ctrl+9"


def test_requires_login(client):
    assert client.get("/api/command/default").status_code == 401


def test_override_and_replace(alice):
    client, user_id = alice
    command_id = _command_id(client, "moveLeft")

    response = client.put(f"/api/command/{command_id}", json={"keybinding": "Ctrl+H"})
    assert response.json() == {"user_id": user_id, "command_id": command_id, "keybinding": "Ctrl+H"}

    client.put(f"/api/command/{command_id}", json={"keybinding": "  Alt+H "})
    assert client.get("/api/command").json() == [{"user_id": user_id, "command_id": command_id, "keybinding": "Alt+H"}]


def test_overrides_are_per_user(alice, bob):
    client, _ = alice
    bob_client, _ = bob
    command_id = _command_id(client, "moveDown")

    client.put(f"/api/command/{command_id}", json={"keybinding": "Ctrl+J"})

    assert bob_client.get("/api/command").json() == []


def test_reset_one(alice):
    client, _ = alice
    command_id = _command_id(client, "moveUp")
    client.put(f"/api/command/{command_id}", json={"keybinding": "Ctrl+K"})

    response = client.delete(f"/api/command/{command_id}")

    assert response.json()["default_keybinding"] == "k"
    assert client.get("/api/command").json() == []


def test_reset_all(alice):
    client, _ = alice
    for name in ("moveLeft", "moveDown"):
        client.put(f"/api/command/{_command_id(client, name)}", json={"keybinding": "Ctrl+X"})

    assert client.delete("/api/command/reset").json()["result"]["removed"] == 2
    assert client.get("/api/command").json() == []


def test_unknown_command(alice):
    client, _ = alice

    response = client.put("/api/command/9999", json={"keybinding": "Ctrl+Q"})

    assert response.status_code == 404
    assert response.json()["error"] == "command_not_found"
    assert client.delete("/api/command/9999").status_code == 404


def test_invalid_keybinding(alice):
    client, _ = alice
    command_id = _command_id(client, "moveLeft")

    assert client.put(f"/api/command/{command_id}", json={"keybinding": "   "}).status_code == 400
    assert client.put(f"/api/command/{command_id}", json={"keybinding": "K" * 65}).status_code == 400
