import pytest

from api.services.recitation import SECONDS_PER_DAY

UNAUTHORIZE = {"message": "Unauthorize", "result": None}
AUDIO_URL = "https://cdn.example.com/recitations/fatihah.webm"
DAY0 = 1_700_006_400


def _auth(token):
    return {"Authorization": token}


def _me(client, tokens):
    return client.get("/api/v1/auth/current_user", headers=_auth(tokens["access_token"])).get_json()["result"]["id"]


def _recite(client, tokens, **fields):
    payload = {"file_url": AUDIO_URL}
    payload.update(fields)
    return client.post("/api/v1/recordings/confirm-upload", json=payload, headers=_auth(tokens["access_token"]))


@pytest.fixture()
def clock(app):
    class Clock:
        now = DAY0

        def __call__(self):
            return self.now

    fake = Clock()
    app.extensions["recitation_service"].clock = fake
    return fake


def test_recordings_require_token(client):
    response = client.get("/api/v1/recordings/user")

    assert response.status_code == 401
    assert response.get_json() == UNAUTHORIZE


def test_confirm_upload_saves_recording_and_starts_streak(client, member_tokens, clock):
    response = _recite(client, member_tokens, note="after fajr", chapter_id=1)

    assert response.status_code == 201
    body = response.get_json()
    assert body["message"] == "Recording confirmed and saved successfully"
    recording = body["result"]["recording"]
    assert recording["user_id"] == _me(client, member_tokens)
    assert (recording["file_url"], recording["note"], recording["chapter_id"]) == (AUDIO_URL, "after fajr", 1)
    assert body["result"]["streak"]["current_streak"] == 1
    assert body["result"]["streak"]["last_recorded_at"] == DAY0


def test_streak_follows_recitation_days(client, member_tokens, clock):
    def current():
        streak = client.get("/api/v1/streaks/user", headers=_auth(member_tokens["access_token"])).get_json()["result"]
        return streak["current_streak"], streak["longest_streak"]

    _recite(client, member_tokens)
    clock.now += 3600
    _recite(client, member_tokens)
    assert current() == (1, 1)

    clock.now = DAY0 + SECONDS_PER_DAY
    _recite(client, member_tokens)
    clock.now = DAY0 + 2 * SECONDS_PER_DAY
    _recite(client, member_tokens)
    assert current() == (3, 3)

    clock.now = DAY0 + 5 * SECONDS_PER_DAY
    _recite(client, member_tokens)
    assert current() == (1, 3)


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"file_url": AUDIO_URL, "chapter_id": 115}, "chapter_id"),
        ({"file_url": AUDIO_URL, "chapter_id": 0}, "chapter_id"),
        ({"file_url": "not a url"}, "file_url"),
        ({"note": "missing file"}, "file_url"),
    ],
)
def test_confirm_upload_validates_metadata(client, member_tokens, payload, field):
    response = client.post(
        "/api/v1/recordings/confirm-upload",
        json=payload,
        headers=_auth(member_tokens["access_token"]),
    )

    assert response.status_code == 422
    assert field in response.get_json()["result"]
    assert client.get("/api/v1/streaks/user", headers=_auth(member_tokens["access_token"])).status_code == 404


def test_caller_recordings_are_paginated_newest_first(client, member_tokens, admin_tokens, clock):
    headers = _auth(member_tokens["access_token"])
    ids = [_recite(client, member_tokens, note=str(i)).get_json()["result"]["recording"]["id"] for i in range(3)]
    _recite(client, admin_tokens)

    first = client.get("/api/v1/recordings/user?page=1&limit=2", headers=headers).get_json()
    second = client.get("/api/v1/recordings/user?page=2&limit=2", headers=headers).get_json()

    assert first["message"] == "Found"
    assert [r["id"] for r in first["result"]["data"]] == [ids[2], ids[1]]
    assert first["result"]["metadata"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
    assert [r["id"] for r in second["result"]["data"]] == [ids[0]]


def test_caller_recordings_empty_page(client, member_tokens):
    response = client.get("/api/v1/recordings/user", headers=_auth(member_tokens["access_token"]))

    assert response.status_code == 200
    assert response.get_json() == {
        "message": "No recordings found",
        "result": {"data": [], "metadata": {"page": 1, "limit": 10, "total": 0, "total_pages": 0}},
    }


def test_pagination_is_clamped_and_checked(client, member_tokens):
    headers = _auth(member_tokens["access_token"])

    clamped = client.get("/api/v1/recordings/user?page=0&limit=1000", headers=headers)
    invalid = client.get("/api/v1/recordings/user?page=abc", headers=headers)

    assert clamped.get_json()["result"]["metadata"]["page"] == 1
    assert clamped.get_json()["result"]["metadata"]["limit"] == 100
    assert invalid.status_code == 400
    assert invalid.get_json() == {"message": "page and limit must be integers", "result": None}


def test_member_creates_recording_for_self_without_touching_streak(client, admin_tokens, member_tokens):
    response = client.post(
        "/api/v1/recordings",
        json={"user_id": _me(client, admin_tokens), "file_url": AUDIO_URL},
        headers=_auth(member_tokens["access_token"]),
    )

    assert response.status_code == 201
    assert response.get_json()["message"] == "Recording created"
    assert response.get_json()["result"]["user_id"] == _me(client, member_tokens)
    assert client.get("/api/v1/streaks/user", headers=_auth(member_tokens["access_token"])).status_code == 404


def test_admin_create_requires_existing_user(client, admin_tokens):
    headers = _auth(admin_tokens["access_token"])

    missing = client.post("/api/v1/recordings", json={"file_url": AUDIO_URL}, headers=headers)
    unknown = client.post("/api/v1/recordings", json={"user_id": 999, "file_url": AUDIO_URL}, headers=headers)

    assert missing.status_code == 422
    assert unknown.status_code == 404
    assert unknown.get_json() == {"message": "User Not Found", "result": None}


def test_members_see_only_their_own_recordings(client, admin_tokens, member_tokens, clock):
    admin_headers = _auth(admin_tokens["access_token"])
    member_headers = _auth(member_tokens["access_token"])
    admin_recording = _recite(client, admin_tokens).get_json()["result"]["recording"]["id"]
    _recite(client, member_tokens)

    member_list = client.get("/api/v1/recordings", headers=member_headers).get_json()
    admin_list = client.get("/api/v1/recordings", headers=admin_headers).get_json()

    assert member_list["message"] == "Recording Found"
    assert [r["user_id"] for r in member_list["result"]] == [_me(client, member_tokens)]
    assert len(admin_list["result"]) == 2
    assert client.get(f"/api/v1/recordings/{admin_recording}", headers=member_headers).status_code == 404
    assert client.get(f"/api/v1/recordings/{admin_recording}", headers=admin_headers).status_code == 200


def test_list_recordings_empty_is_not_found(client, member_tokens):
    response = client.get("/api/v1/recordings", headers=_auth(member_tokens["access_token"]))

    assert response.status_code == 404
    assert response.get_json() == {"message": "Recording Not Found", "result": None}


@pytest.mark.parametrize("method", ["patch", "put", "delete"])
def test_only_admins_edit_or_delete_recordings(client, member_tokens, clock, method):
    recording_id = _recite(client, member_tokens).get_json()["result"]["recording"]["id"]

    response = getattr(client, method)(
        f"/api/v1/recordings/{recording_id}",
        json={"note": "edited"},
        headers=_auth(member_tokens["access_token"]),
    )

    assert response.status_code == 401
    assert response.get_json() == UNAUTHORIZE


def test_admin_edits_and_deletes_recordings(client, admin_tokens, member_tokens, clock):
    headers = _auth(admin_tokens["access_token"])
    recording_id = _recite(client, member_tokens).get_json()["result"]["recording"]["id"]

    updated = client.patch(f"/api/v1/recordings/{recording_id}", json={"note": "edited", "chapter_id": 2}, headers=headers)
    out_of_range = client.put(f"/api/v1/recordings/{recording_id}", json={"chapter_id": 200}, headers=headers)
    deleted = client.delete(f"/api/v1/recordings/{recording_id}", headers=headers)
    again = client.delete(f"/api/v1/recordings/{recording_id}", headers=headers)
    invalid = client.delete("/api/v1/recordings/abc", headers=headers)

    assert updated.status_code == 200
    assert updated.get_json()["result"]["note"] == "edited"
    assert updated.get_json()["result"]["chapter_id"] == 2
    assert out_of_range.status_code == 422
    assert deleted.get_json() == {"message": "Recording deleted", "result": True}
    assert again.status_code == 404
    assert invalid.get_json() == {"message": "Invalid recording id", "result": None}
