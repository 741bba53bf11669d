"""Integration tests for community listings and share links."""

from fastapi.testclient import TestClient


def _publish(client: TestClient, auth, playlist_id: str, owner: str) -> str:
    response = client.put(
        f"/api/playlists/{playlist_id}/visibility",
        json={"visibility": "public"},
        headers=auth(owner),
    )
    assert response.status_code == 200
    return str(response.json()["share_token"])


def test_public_listing_hides_private(client: TestClient, auth, create_playlist) -> None:
    public_id = create_playlist("owner", name="Public")
    create_playlist("owner", name="Private")
    _publish(client, auth, public_id, "owner")

    playlists = client.get("/api/discover/public").json()

    assert [p["id"] for p in playlists] == [public_id]


def test_share_link_counts_views(client: TestClient, auth, create_playlist) -> None:
    playlist_id = create_playlist("owner")
    token = _publish(client, auth, playlist_id, "owner")

    first = client.get(f"/api/share/{token}")
    second = client.get(f"/api/share/{token}")

    assert first.status_code == 200
    assert first.json()["playlist"]["views"] == 1
    assert second.json()["playlist"]["views"] == 2
    assert len(second.json()["songs"]) == 20


def test_share_link_survives_going_private(
    client: TestClient, auth, create_playlist
) -> None:
    playlist_id = create_playlist("owner")
    token = _publish(client, auth, playlist_id, "owner")
    client.put(
        f"/api/playlists/{playlist_id}/visibility",
        json={"visibility": "private"},
        headers=auth("owner"),
    )

    response = client.get(f"/api/share/{token}")

    assert response.status_code == 200
    assert response.json()["playlist"]["id"] == playlist_id


def test_unknown_share_token(client: TestClient) -> None:
    assert client.get("/api/share/not-a-real-token").status_code == 404


def test_share_link_hides_owner_details(
    client: TestClient, auth, create_playlist
) -> None:
    playlist_id = create_playlist("owner", name="Mix")
    token = _publish(client, auth, playlist_id, "owner")

    playlist = client.get(f"/api/share/{token}").json()["playlist"]

    assert playlist["name"] == "Mix"
    assert playlist["share_token"] == token
    for field in ("owner_id", "exported_at", "external_playlist_url", "is_exported"):
        assert field not in playlist


def test_public_listing_hides_owner_details(
    client: TestClient, auth, create_playlist
) -> None:
    playlist_id = create_playlist("owner", name="Mix")
    _publish(client, auth, playlist_id, "owner")

    for path in ("/api/discover/public", "/api/discover/trending", "/api/discover/filtered"):
        playlists = client.get(path).json()
        assert [p["id"] for p in playlists] == [playlist_id]
        assert "owner_id" not in playlists[0]
        assert "external_playlist_url" not in playlists[0]


def test_trending_follows_views(client: TestClient, auth, create_playlist) -> None:
    quiet = create_playlist("owner", name="Quiet")
    popular = create_playlist("owner", name="Popular")
    _publish(client, auth, quiet, "owner")
    token = _publish(client, auth, popular, "owner")
    for _ in range(3):
        client.get(f"/api/share/{token}")

    playlists = client.get("/api/discover/trending").json()

    assert [p["id"] for p in playlists] == [popular, quiet]


def test_filtered_by_genre_and_owner_search(
    client: TestClient, auth, create_playlist
) -> None:
    client.get("/api/playlists", headers=auth("dj", name="DJ Sunshine"))
    pop = create_playlist("dj", name="Party", genre="Pop", mood="Happy")
    rock = create_playlist("owner", name="Riffs", genre="Rock")
    _publish(client, auth, pop, "dj")
    _publish(client, auth, rock, "owner")

    by_genre = client.get("/api/discover/filtered", params={"genre": "pop"}).json()
    by_owner = client.get("/api/discover/filtered", params={"search": "sunshine"}).json()

    assert [p["id"] for p in by_genre] == [pop]
    assert [p["id"] for p in by_owner] == [pop]
    assert by_owner[0]["owner_name"] == "DJ Sunshine"


def test_limit_is_clamped(client: TestClient) -> None:
    response = client.get("/api/discover/public", params={"limit": 100000})
    assert response.status_code == 200


def test_invalid_limit(client: TestClient) -> None:
    assert client.get("/api/discover/trending", params={"limit": 0}).status_code == 422
