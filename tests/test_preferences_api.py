import dataclasses

import pytest

from collabdocs.core.exceptions import BackgroundNotFoundError
from collabdocs.database.seed import DEFAULT_PREFERENCES
from collabdocs.services.preference_service import PreferenceService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x01" * 16


def _preference(client, name):
    return next(p for p in client.get("/api/preference").json() if p["preference_name"] == name)


# ============= preferences =============


def test_defaults_are_effective(alice):
    client, _ = alice

    preferences = client.get("/api/preference").json()

    assert len(preferences) == len(DEFAULT_PREFERENCES)
    assert _preference(client, "theme")["preference_value"] == "dark"


def test_override_then_reset(alice, bob):
    client, _ = alice
    bob_client, _ = bob
    theme = _preference(client, "theme")

    response = client.put(f"/api/preference/{theme['preference_id']}", json={"preference_value": "light"})
    assert response.json()["preference_value"] == "light"
    assert client.get(f"/api/preference/{theme['preference_id']}").json()["preference_value"] == "light"
    assert _preference(bob_client, "theme")["preference_value"] == "dark"

    reset = client.delete(f"/api/preference/{theme['preference_id']}")
    assert reset.json()["preference_value"] == "dark"


def test_reset_all(alice):
    client, _ = alice
    theme = _preference(client, "theme")
    font_size = _preference(client, "font_size")
    client.put(f"/api/preference/{theme['preference_id']}", json={"preference_value": "light"})
    client.put(f"/api/preference/{font_size['preference_id']}", json={"preference_value": "18"})

    assert client.delete("/api/preference").json()["result"]["removed"] == 2
    assert _preference(client, "font_size")["preference_value"] == "14"


def test_unknown_preference(alice):
    client, _ = alice

    response = client.get("/api/preference/9999")

    assert response.status_code == 404
    assert response.json()["error"] == "preference_not_found"
    assert client.put("/api/preference/9999", json={"preference_value": "x"}).status_code == 404


# ============= background image =============


def test_background_round_trip(alice):
    client, _ = alice

    assert client.get("/api/preference/background").status_code == 404

    upload = client.post(
        "/api/preference/background",
        files={"background_image": ("wall.png", PNG_BYTES, "image/png")},
    )
    assert upload.status_code == 200

    image = client.get("/api/preference/background")
    assert image.content == PNG_BYTES
    assert image.headers["content-type"] == "image/png"

    assert client.delete("/api/preference/background").json()["result"]["success"] is True
    assert client.delete("/api/preference/background").json()["result"]["success"] is False
    assert client.get("/api/preference/background").status_code == 404


def test_background_rejects_text(alice):
    client, _ = alice

    response = client.post(
        "/api/preference/background",
        files={"background_image": ("notes.txt", b"not an image", "text/plain")},
    )
    assert response.status_code == 400


def test_background_falls_back_to_default_file(alice, tmp_path):
    _, user_id = alice
    default = tmp_path / "default.png"
    default.write_bytes(PNG_BYTES)

    service = PreferenceService()
    service.settings = dataclasses.replace(service.settings, default_background_path=str(default))

    assert service.get_background(user_id) == (PNG_BYTES, "image/png")


def test_missing_default_file_is_not_found(alice, tmp_path):
    _, user_id = alice
    service = PreferenceService()
    service.settings = dataclasses.replace(service.settings, default_background_path=str(tmp_path / "gone.png"))

    with pytest.raises(BackgroundNotFoundError):
        service.get_background(user_id)
