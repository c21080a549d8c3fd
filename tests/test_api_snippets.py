"""HTTP contract tests for the owner and public snippet endpoints."""

from conftest import snippet_body


def create(client, headers, title="hello", **overrides):
    response = client.post("/api/snippets", json=snippet_body(title, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_list_requires_owner(client):
    assert client.get("/api/snippets").status_code == 401


def test_create_assigns_id_and_timestamps(client, alice):
    created = create(client, alice, categories=["Web", "web", " API "])

    assert isinstance(created["id"], int)
    assert created["updated_at"]
    assert created["expiry_date"] is None
    assert created["categories"] == ["api", "web"]
    assert created["user_id"] == "alice"


def test_create_caps_categories(client, alice):
    created = create(client, alice, categories=[f"tag{i}" for i in range(30)])
    assert len(created["categories"]) == 20


def test_create_without_fragments_is_rejected(client, alice):
    response = client.post("/api/snippets", json=snippet_body(fragments=[]), headers=alice)
    assert response.status_code == 422


def test_list_response_shape(client, alice):
    for i in range(3):
        create(client, alice, f"s{i}")

    response = client.get("/api/snippets", params={"limit": 2}, headers=alice)
    assert response.status_code == 200
    body = response.json()
    assert [s["title"] for s in body["data"]] == ["s2", "s1"]
    assert body["pagination"] == {"total": 3, "offset": 0, "limit": 2, "hasMore": True}


def test_list_clamps_bad_parameters(client, alice):
    create(client, alice)
    response = client.get("/api/snippets", params={"limit": "9999", "offset": "-4", "sort": "weird"}, headers=alice)

    assert response.status_code == 200
    assert response.json()["pagination"]["limit"] == 100
    assert response.json()["pagination"]["offset"] == 0


def test_list_parameters_are_documented(client):
    operation = client.get("/openapi.json").json()["paths"]["/api/snippets"]["get"]
    names = {p["name"] for p in operation["parameters"] if p["in"] == "query"}

    assert {"search", "searchCode", "language", "category", "favorites", "pinned", "recycled", "sort", "offset", "limit"} <= names


def test_list_search_code_alias(client, alice):
    create(client, alice, "plain", fragments=[{"file_name": "a.py", "code": "needle()", "language": "python"}])

    without = client.get("/api/snippets", params={"search": "needle"}, headers=alice).json()
    with_code = client.get("/api/snippets", params={"search": "needle", "searchCode": "true"}, headers=alice).json()

    assert without["data"] == []
    assert [s["title"] for s in with_code["data"]] == ["plain"]


def test_not_found_and_wrong_state_carry_error_codes(client, alice):
    snippet_id = create(client, alice)["id"]

    missing = client.patch("/api/snippets/424242/recycle", headers=alice)
    wrong_state = client.patch(f"/api/snippets/{snippet_id}/restore", headers=alice)

    assert missing.status_code == wrong_state.status_code == 404
    assert missing.json()["error"] == "not_found"
    assert wrong_state.json() == {"detail": "Snippet not in recycle bin", "error": "invalid_state"}


def test_list_filters_by_category_and_owner(client, alice, bob):
    create(client, alice, "both", categories=["a", "b"])
    create(client, alice, "only a", categories=["a"])
    create(client, bob, "bob both", categories=["a", "b"])

    body = client.get("/api/snippets", params={"category": "a,b"}, headers=alice).json()
    assert [s["title"] for s in body["data"]] == ["both"]


def test_get_single_snippet(client, alice, bob):
    created = create(client, alice)

    assert client.get(f"/api/snippets/{created['id']}", headers=alice).json()["title"] == "hello"
    assert client.get(f"/api/snippets/{created['id']}", headers=bob).status_code == 404


def test_update_replaces_fields(client, alice):
    created = create(client, alice)
    body = snippet_body("renamed", categories=["x"], fragments=[
        {"file_name": "a.go", "code": "package main", "language": "Go"},
        {"file_name": "b.go", "code": "", "language": "go"},
    ])

    response = client.put(f"/api/snippets/{created['id']}", json=body, headers=alice)

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "renamed"
    assert updated["categories"] == ["x"]
    assert [f["file_name"] for f in updated["fragments"]] == ["a.go", "b.go"]
    assert updated["fragments"][0]["language"] == "go"


def test_update_missing_is_404(client, alice):
    assert client.put("/api/snippets/424242", json=snippet_body(), headers=alice).status_code == 404


def test_recycle_restore_delete_flow(client, alice):
    snippet_id = create(client, alice)["id"]

    assert client.patch(f"/api/snippets/{snippet_id}/recycle", headers=alice).json() == {"id": snippet_id}
    second = client.patch(f"/api/snippets/{snippet_id}/recycle", headers=alice)
    assert second.status_code == 404
    assert "recycle bin" in second.json()["detail"]

    recycled = client.get("/api/snippets", params={"recycled": "true"}, headers=alice).json()
    assert [s["id"] for s in recycled["data"]] == [snippet_id]
    assert recycled["data"][0]["expiry_date"] is not None
    assert client.get("/api/snippets", headers=alice).json()["data"] == []

    assert client.patch(f"/api/snippets/{snippet_id}/restore", headers=alice).json() == {"id": snippet_id}
    assert client.patch(f"/api/snippets/{snippet_id}/restore", headers=alice).status_code == 404
    assert client.delete(f"/api/snippets/{snippet_id}", headers=alice).status_code == 404

    client.patch(f"/api/snippets/{snippet_id}/recycle", headers=alice)
    assert client.delete(f"/api/snippets/{snippet_id}", headers=alice).json() == {"id": snippet_id}
    assert client.get(f"/api/snippets/{snippet_id}", headers=alice).status_code == 404


def test_pin_and_favorite(client, alice):
    snippet_id = create(client, alice)["id"]

    pinned = client.patch(f"/api/snippets/{snippet_id}/pin", json={"is_pinned": True}, headers=alice)
    favorite = client.patch(f"/api/snippets/{snippet_id}/favorite", json={"is_favorite": True}, headers=alice)

    assert pinned.json()["is_pinned"] is True
    assert favorite.json()["is_favorite"] is True
    assert favorite.json()["is_pinned"] is True
    favorites = client.get("/api/snippets", params={"favorites": "true"}, headers=alice).json()
    assert [s["id"] for s in favorites["data"]] == [snippet_id]


def test_pin_foreign_snippet_is_404(client, alice, bob):
    snippet_id = create(client, alice)["id"]
    response = client.patch(f"/api/snippets/{snippet_id}/pin", json={"is_pinned": True}, headers=bob)
    assert response.status_code == 404


def test_metadata_is_scoped(client, alice, bob):
    create(client, alice, categories=["b", "a"], fragments=[
        {"file_name": "x.py", "code": "", "language": "Python"},
        {"file_name": "x.rs", "code": "", "language": "rust"},
    ])
    create(client, bob, categories=["secret"], is_public=False)

    body = client.get("/api/snippets/metadata", headers=alice).json()
    assert body["categories"] == ["a", "b"]
    assert body["languages"] == ["python", "rust"]
    assert body["counts"] == {"total": 1}


def test_public_listing_and_metadata(client, alice, bob):
    create(client, alice, "private one")
    public_id = create(client, bob, "shared", is_public=True, categories=["open"])["id"]

    listing = client.get("/api/public/snippets", params={"recycled": "true"}).json()
    assert [s["title"] for s in listing["data"]] == ["shared"]
    assert client.get("/api/public/snippets/metadata").json()["categories"] == ["open"]
    assert client.get(f"/api/public/snippets/{public_id}").status_code == 200


def test_public_snippet_hidden_once_recycled(client, bob):
    public_id = create(client, bob, is_public=True)["id"]
    client.patch(f"/api/snippets/{public_id}/recycle", headers=bob)

    assert client.get(f"/api/public/snippets/{public_id}").status_code == 404
    assert client.get("/api/public/snippets").json()["pagination"]["total"] == 0


def test_raw_fragment_normalizes_line_endings(client, alice):
    created = create(client, alice, fragments=[{"file_name": "run.sh", "code": "a\r\nb\rc", "language": "bash"}])
    fragment_id = created["fragments"][0]["id"]

    response = client.get(f"/api/snippets/{created['id']}/{fragment_id}/raw", headers=alice)

    assert response.status_code == 200
    assert response.text == "a\nb\nc"
    assert response.headers["content-type"].startswith("text/plain")
    assert client.get(f"/api/snippets/{created['id']}/999999/raw", headers=alice).status_code == 404
