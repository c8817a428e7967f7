import pytest
import pytest_asyncio

from app.models import ShopItem


@pytest_asyncio.fixture
async def shop(create):
    saga = await create("/api/admin/shop-items", {"title": "Saga", "type": "saga", "status": "published", "price": 12})
    arc = await create(
        "/api/admin/shop-items",
        {"title": "Arc", "type": "arc", "parent_id": saga["id"], "status": "published", "price": 5},
    )
    issues = [
        await create(
            "/api/admin/shop-items",
            {
                "title": f"Issue {n}",
                "type": "issue",
                "parent_id": arc["id"],
                "order_index": n,
                "status": "published",
                "price": 1.99,
            },
        )
        for n in (1, 2, 3)
    ]
    draft = await create("/api/admin/shop-items", {"title": "Unreleased", "type": "issue", "parent_id": arc["id"]})
    return {"saga": saga, "arc": arc, "issues": issues, "draft": draft}


@pytest.mark.asyncio
async def test_hierarchy_lists_roots_and_children(client, shop):
    roots = await client.get("/api/shop-items/hierarchy", params={"parent_id": "null"})
    assert [i["id"] for i in roots.json()] == [shop["saga"]["id"]]

    children = await client.get("/api/shop-items/hierarchy", params={"parent_id": shop["arc"]["id"]})
    # Drafts never show up publicly
    assert [i["title"] for i in children.json()] == ["Issue 1", "Issue 2", "Issue 3"]

    arcs = await client.get("/api/shop-items/hierarchy", params={"type": "arc"})
    assert [i["id"] for i in arcs.json()] == [shop["arc"]["id"]]


@pytest.mark.asyncio
async def test_hierarchy_rejects_bad_parent_id(client):
    response = await client.get("/api/shop-items/hierarchy", params={"parent_id": "abc"})
    assert response.status_code == 400
    assert response.json() == {"error": "parent_id must be an integer or 'null'"}


@pytest.mark.asyncio
async def test_hierarchy_tree(client, shop):
    response = await client.post("/api/shop-items/hierarchy")
    assert response.status_code == 200
    forest = response.json()

    assert len(forest) == 1
    arc = forest[0]["children"][0]
    assert arc["id"] == shop["arc"]["id"]
    assert len(arc["children"]) == 3
    assert all(issue["children"] == [] for issue in arc["children"])


@pytest.mark.asyncio
async def test_hierarchy_tree_reports_cycles(client, db_session):
    a = ShopItem(title="A", type="saga", status="published")
    db_session.add(a)
    await db_session.flush()
    b = ShopItem(title="B", type="arc", status="published", parent_id=a.id)
    db_session.add(b)
    await db_session.flush()
    a.parent_id = b.id
    await db_session.commit()

    response = await client.post("/api/shop-items/hierarchy")
    assert response.status_code == 500
    body = response.json()
    assert body["error"].startswith("Parent cycle detected")
    assert sorted(body["item_ids"]) == sorted([a.id, b.id])


@pytest.mark.asyncio
async def test_bundles_for_issue_walk_up_the_tree(client, shop):
    response = await client.get(f"/api/shop-items/{shop['issues'][0]['id']}/bundles")
    assert response.status_code == 200
    arc_offer, saga_offer = response.json()

    assert arc_offer["item_id"] == shop["arc"]["id"]
    assert arc_offer["item_count"] == 3
    assert arc_offer["original_price"] == 5.97
    assert arc_offer["bundle_price"] == 5.37
    assert saga_offer["type"] == "saga"
    assert saga_offer["bundle_price"] == 4.0


@pytest.mark.asyncio
async def test_bundles_for_unpublished_item(client, shop):
    response = await client.get(f"/api/shop-items/{shop['draft']['id']}/bundles")
    assert response.status_code == 404
    assert response.json() == {"error": "Shop item not found"}


@pytest.mark.asyncio
async def test_quote_counts_repeated_ids(client, shop):
    issue_id = shop["issues"][0]["id"]
    response = await client.post("/api/shop/quote", json={"item_ids": [issue_id, issue_id, shop["arc"]["id"]]})
    assert response.status_code == 200
    quote = response.json()

    assert quote["item_count"] == 3
    assert quote["subtotal"] == 8.98
    assert quote["discount_rate"] == 0.10
    assert quote["total"] == 8.08


@pytest.mark.asyncio
async def test_quote_rejects_unknown_or_draft_items(client, shop):
    response = await client.post("/api/shop/quote", json={"item_ids": [shop["draft"]["id"], 9999]})
    assert response.status_code == 404
    assert response.json() == {"error": "Shop item not found", "item_ids": sorted([shop["draft"]["id"], 9999])}


@pytest.mark.asyncio
async def test_quote_needs_items(client):
    response = await client.post("/api/shop/quote", json={"item_ids": []})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_item_parent_must_exist(client, admin_headers):
    response = await client.post(
        "/api/admin/shop-items", json={"title": "Orphan", "type": "issue", "parent_id": 9999}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Parent item not found"}


@pytest.mark.asyncio
async def test_admin_item_type_is_validated(client, admin_headers):
    response = await client.post("/api/admin/shop-items", json={"title": "Odd", "type": "chapter"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Validation error: type")


@pytest.mark.asyncio
async def test_admin_cannot_move_item_under_descendant(client, admin_headers, shop):
    response = await client.put(
        f"/api/admin/shop-items/{shop['saga']['id']}",
        json={"parent_id": shop["issues"][0]["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "A shop item cannot be moved under its own descendant"}


@pytest.mark.asyncio
async def test_admin_list_includes_drafts_and_delete_cascades(client, admin_headers, shop):
    response = await client.get("/api/admin/shop-items", headers=admin_headers)
    assert len(response.json()) == 6

    response = await client.delete(f"/api/admin/shop-items/{shop['arc']['id']}", headers=admin_headers)
    assert response.json() == {"message": "Shop item deleted successfully"}

    response = await client.get("/api/admin/shop-items", headers=admin_headers)
    assert [i["id"] for i in response.json()] == [shop["saga"]["id"]]
