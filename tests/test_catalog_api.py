import pytest


@pytest.mark.asyncio
async def test_book_defaults_author(create):
    book = await create("/api/books", {"title": "Untitled"})
    assert book["author"] == "Anonymous"
    assert book["status"] == "draft"
    assert book["id"] > 0


@pytest.mark.asyncio
async def test_create_book_requires_title(client, admin_headers):
    response = await client.post("/api/books", json={"price": 3}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Validation error: title")


@pytest.mark.asyncio
async def test_reader_cannot_create_book(client, reader_headers):
    response = await client.post("/api/books", json={"title": "Nope"}, headers=reader_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_books_nests_summaries(client, reader_headers, catalog):
    response = await client.get("/api/books", headers=reader_headers)
    assert response.status_code == 200
    books = response.json()
    assert len(books) == 1

    volume = books[0]["volumes"][0]
    assert volume == {
        "id": catalog["volume"]["id"],
        "title": "Volume One",
        "status": "draft",
        "sagas": volume["sagas"],
    }
    issues = volume["sagas"][0]["arcs"][0]["issues"]
    assert [i["title"] for i in issues] == ["Issue One", "Issue Two"]


@pytest.mark.asyncio
async def test_list_books_title_filter(client, reader_headers, create):
    await create("/api/books", {"title": "The Long Road"})
    await create("/api/books", {"title": "Short Stories"})

    response = await client.get("/api/books", params={"filter": "long"}, headers=reader_headers)
    assert [b["title"] for b in response.json()] == ["The Long Road"]


@pytest.mark.asyncio
async def test_get_book_full_tree(client, reader_headers, catalog):
    response = await client.get(f"/api/books/{catalog['book']['id']}", headers=reader_headers)
    assert response.status_code == 200
    book = response.json()

    issue = book["volumes"][0]["sagas"][0]["arcs"][0]["issues"][0]
    assert issue["word_count"] == 40000
    assert issue["arc_id"] == catalog["arc"]["id"]
    assert book["reviews"] == []


@pytest.mark.asyncio
async def test_get_missing_book(client, reader_headers):
    response = await client.get("/api/books/9999", headers=reader_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Book not found"}


@pytest.mark.asyncio
async def test_update_book_ignores_server_fields(client, admin_headers, create):
    book = await create("/api/books", {"title": "Draft"})
    response = await client.put(
        f"/api/books/{book['id']}",
        json={"title": "Final", "created_at": "1999-01-01T00:00:00Z", "status": "published"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Final"
    assert updated["status"] == "published"
    assert not updated["created_at"].startswith("1999")
    assert updated["updated_at"] != book["updated_at"]


@pytest.mark.asyncio
async def test_update_missing_book(client, admin_headers):
    response = await client.put("/api/admin/books/9999", json={"title": "x"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Book not found"}


@pytest.mark.asyncio
async def test_delete_book_cascades(client, admin_headers, catalog):
    response = await client.delete(f"/api/books/{catalog['book']['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Book deleted successfully"}

    for path, node in [
        ("volumes", catalog["volume"]),
        ("sagas", catalog["saga"]),
        ("arcs", catalog["arc"]),
        ("issues", catalog["issues"][0]),
    ]:
        missing = await client.get(f"/api/admin/{path}/{node['id']}", headers=admin_headers)
        assert missing.status_code == 404, path


@pytest.mark.asyncio
async def test_admin_books_newest_first(client, admin_headers, create):
    await create("/api/admin/books", {"title": "First"})
    await create("/api/admin/books", {"title": "Second"})

    response = await client.get("/api/admin/books", headers=admin_headers)
    assert [b["title"] for b in response.json()] == ["Second", "First"]


@pytest.mark.asyncio
async def test_level_create_needs_existing_parent(client, admin_headers):
    response = await client.post(
        "/api/admin/sagas", json={"volume_id": 999, "title": "Lost", "order_index": 1}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Volume not found"}


@pytest.mark.asyncio
async def test_level_order_index_unique_per_parent(client, admin_headers, catalog):
    response = await client.post(
        "/api/admin/issues",
        json={"arc_id": catalog["arc"]["id"], "title": "Clash", "order_index": 1},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Order index already exists for this arc"}


@pytest.mark.asyncio
async def test_level_update_checks_order_conflicts(client, admin_headers, catalog):
    second = catalog["issues"][1]
    response = await client.put(f"/api/admin/issues/{second['id']}", json={"order_index": 1}, headers=admin_headers)
    assert response.status_code == 409

    response = await client.put(f"/api/admin/issues/{second['id']}", json={"order_index": 3}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["order_index"] == 3

    # Same index as before is not a conflict with itself
    response = await client.put(
        f"/api/admin/issues/{second['id']}", json={"order_index": 3, "title": "Renamed"}, headers=admin_headers
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_level_reparent_checks_new_parent(client, admin_headers, create, catalog):
    other_arc = await create("/api/admin/arcs", {"saga_id": catalog["saga"]["id"], "title": "Second Arc", "order_index": 2})
    issue = catalog["issues"][0]

    # Index 1 is free under the new arc
    response = await client.put(f"/api/admin/issues/{issue['id']}", json={"arc_id": other_arc["id"]}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["arc_id"] == other_arc["id"]

    response = await client.put(f"/api/admin/issues/{issue['id']}", json={"arc_id": 9999}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Arc not found"}


@pytest.mark.asyncio
async def test_level_get_includes_parent_and_children(client, admin_headers, catalog):
    response = await client.get(f"/api/admin/arcs/{catalog['arc']['id']}", headers=admin_headers)
    assert response.status_code == 200
    arc = response.json()
    assert arc["saga"] == {"id": catalog["saga"]["id"], "title": "First Saga"}
    assert [i["title"] for i in arc["issues"]] == ["Issue One", "Issue Two"]


@pytest.mark.asyncio
async def test_level_list_and_delete(client, admin_headers, catalog):
    response = await client.get("/api/admin/volumes", headers=admin_headers)
    assert response.status_code == 200
    assert [v["id"] for v in response.json()] == [catalog["volume"]["id"]]

    response = await client.delete(f"/api/admin/volumes/{catalog['volume']['id']}", headers=admin_headers)
    assert response.json() == {"message": "Volume deleted successfully"}

    response = await client.delete(f"/api/admin/volumes/{catalog['volume']['id']}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Volume not found"}


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_columns(client, admin_headers, catalog):
    book_id = catalog["book"]["id"]
    response = await client.put(f"/api/books/{book_id}", json={"title": None}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Validation error: title: Value error, may not be null"}

    issue_id = catalog["issues"][0]["id"]
    response = await client.put(f"/api/admin/issues/{issue_id}", json={"arc_id": None}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Validation error: arc_id")

    # Nullable columns can still be cleared
    response = await client.put(f"/api/books/{book_id}", json={"description": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["title"] == "The Long Road"
