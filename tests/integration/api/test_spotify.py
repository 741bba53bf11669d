"""Integration tests for Spotify connection and export endpoints."""

from fastapi.testclient import TestClient

from upbeat.domain.entities import Provider


def _connect(client: TestClient, auth, user_id: str = "u1") -> None:
    url = client.get("/api/spotify/authorize", headers=auth(user_id)).json()["url"]
    state = url.split("state=")[1]
    response = client.get(
        "/api/spotify/callback",
        params={"code": "the-code", "state": state},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/?spotify_connected=true"


def test_status_before_and_after_connect(client: TestClient, auth) -> None:
    assert client.get("/api/spotify/status", headers=auth()).json() == {"connected": False}

    _connect(client, auth)

    assert client.get("/api/spotify/status", headers=auth()).json() == {"connected": True}


def test_disconnect(client: TestClient, auth) -> None:
    _connect(client, auth)

    response = client.delete("/api/spotify/connection", headers=auth())

    assert response.status_code == 204
    assert client.get("/api/spotify/status", headers=auth()).json() == {"connected": False}


def test_callback_denied(client: TestClient) -> None:
    response = client.get(
        "/api/spotify/callback", params={"error": "access_denied"}, follow_redirects=False
    )
    assert response.headers["location"] == "/?error=spotify_auth_denied"


def test_callback_missing_code(client: TestClient) -> None:
    response = client.get("/api/spotify/callback", follow_redirects=False)
    assert response.headers["location"] == "/?error=invalid_code"


def test_callback_forged_state(client: TestClient) -> None:
    response = client.get(
        "/api/spotify/callback",
        params={"code": "c", "state": "forged"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/?error=spotify_auth_failed"


def test_export_without_connection(client: TestClient, auth, create_playlist) -> None:
    playlist_id = create_playlist("u1")

    response = client.post(f"/api/spotify/export/{playlist_id}", headers=auth("u1"))

    assert response.status_code == 409


def test_export_reports_counts(
    client: TestClient, auth, create_playlist, fake_spotify_client
) -> None:
    _connect(client, auth, "u1")
    playlist_id = create_playlist("u1")

    response = client.post(f"/api/spotify/export/{playlist_id}", headers=auth("u1"))

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["external_playlist_id"] == "ext1"
    assert payload["playlist_url"] == "https://open.spotify.com/playlist/ext1"
    assert payload["tracks_exported"] == payload["total_tracks"] == 20
    fake_spotify_client.add_tracks_to_playlist.assert_awaited_once()

    mine = client.get("/api/playlists", headers=auth("u1")).json()
    assert mine[0]["exported_at"] is not None
    assert mine[0]["external_playlist_url"] == "https://open.spotify.com/playlist/ext1"


def test_export_of_itunes_playlist_exports_nothing(
    client: TestClient, auth, seeds, fake_spotify_client
) -> None:
    _connect(client, auth, "u1")
    created = client.post(
        "/api/music/itunes/generate",
        json={"name": "iTunes mix", "seeds": seeds(Provider.ITUNES)},
        headers=auth("u1"),
    ).json()

    response = client.post(
        f"/api/spotify/export/{created['playlist_id']}", headers=auth("u1")
    )

    assert response.status_code == 200
    assert response.json()["tracks_exported"] == 0
    assert response.json()["total_tracks"] == 7
    fake_spotify_client.add_tracks_to_playlist.assert_not_awaited()


def test_export_foreign_playlist(client: TestClient, auth, create_playlist) -> None:
    _connect(client, auth, "intruder")
    playlist_id = create_playlist("owner")

    response = client.post(f"/api/spotify/export/{playlist_id}", headers=auth("intruder"))

    assert response.status_code == 403


def test_export_unknown_playlist(client: TestClient, auth) -> None:
    response = client.post("/api/spotify/export/nope", headers=auth("u1"))
    assert response.status_code == 404
