import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def tagged(create):
    hero = await create("/api/characters", {"name": "Mira"})
    villain = await create("/api/characters", {"name": "Odo"})
    brave = await create("/api/character-tags", {"name": "  brave ", "category": "trait"})
    cunning = await create("/api/character-tags", {"name": "cunning", "category": "trait"})
    pilot = await create("/api/character-tags", {"name": "pilot", "category": "role"})
    return {"hero": hero, "villain": villain, "brave": brave, "cunning": cunning, "pilot": pilot}


@pytest.mark.asyncio
async def test_create_tag_trims_name_and_rejects_duplicates(client, admin_headers, tagged):
    assert tagged["brave"]["name"] == "brave"
    assert tagged["brave"]["usage_count"] == 0

    response = await client.post("/api/character-tags", json={"name": "brave "}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json() == {"error": "Tag already exists"}


@pytest.mark.asyncio
async def test_list_tags_filters(client, tagged):
    response = await client.get("/api/character-tags", params={"category": "trait"})
    body = response.json()
    assert [t["name"] for t in body["data"]] == ["brave", "cunning"]
    assert body["pagination"] == {"offset": 0, "limit": 50, "total": 2}

    response = await client.get("/api/character-tags", params={"search": "PIL"})
    assert [t["name"] for t in response.json()["data"]] == ["pilot"]


@pytest.mark.asyncio
async def test_assignments_replace_whole_set(client, admin_headers, tagged):
    hero = tagged["hero"]["id"]
    brave, cunning, pilot = tagged["brave"]["id"], tagged["cunning"]["id"], tagged["pilot"]["id"]

    response = await client.post(
        "/api/character-tags/assignments",
        json={"character_id": hero, "tag_ids": [brave, pilot, brave]},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assigned = response.json()
    assert [a["tag_id"] for a in assigned] == [brave, pilot]
    assert assigned[0]["character_tags"]["name"] == "brave"
    assert assigned[0]["character_tags"]["usage_count"] == 1

    response = await client.post(
        "/api/character-tags/assignments",
        json={"character_id": hero, "tag_ids": [cunning]},
        headers=admin_headers,
    )
    assert [a["tag_id"] for a in response.json()] == [cunning]

    listing = await client.get("/api/character-tags/assignments", params={"character_id": hero})
    assert [a["character_tags"]["name"] for a in listing.json()] == ["cunning"]

    counts = {t["name"]: t["usage_count"] for t in (await client.get("/api/character-tags")).json()["data"]}
    assert counts == {"brave": 0, "cunning": 1, "pilot": 0}


@pytest.mark.asyncio
async def test_usage_counts_order_tags(client, admin_headers, tagged):
    pilot = tagged["pilot"]["id"]
    for character in (tagged["hero"], tagged["villain"]):
        await client.post(
            "/api/character-tags/assignments",
            json={"character_id": character["id"], "tag_ids": [pilot]},
            headers=admin_headers,
        )

    response = await client.get("/api/character-tags")
    names = [t["name"] for t in response.json()["data"]]
    assert names == ["pilot", "brave", "cunning"]


@pytest.mark.asyncio
async def test_empty_tag_set_clears_assignments(client, admin_headers, tagged):
    hero = tagged["hero"]["id"]
    await client.post(
        "/api/character-tags/assignments", json={"character_id": hero, "tag_ids": [tagged["brave"]["id"]]}, headers=admin_headers
    )
    response = await client.post(
        "/api/character-tags/assignments", json={"character_id": hero, "tag_ids": []}, headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json() == []


@pytest.mark.asyncio
async def test_assignment_errors_keep_previous_set(client, admin_headers, tagged):
    hero = tagged["hero"]["id"]
    brave = tagged["brave"]["id"]
    await client.post(
        "/api/character-tags/assignments", json={"character_id": hero, "tag_ids": [brave]}, headers=admin_headers
    )

    response = await client.post(
        "/api/character-tags/assignments", json={"character_id": hero, "tag_ids": [brave, 9999]}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Tag not found", "tag_ids": [9999]}

    response = await client.post(
        "/api/character-tags/assignments", json={"character_id": 9999, "tag_ids": [brave]}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Character not found"}

    listing = await client.get("/api/character-tags/assignments", params={"character_id": hero})
    assert [a["tag_id"] for a in listing.json()] == [brave]


@pytest.mark.asyncio
async def test_assignments_need_character_id(client):
    response = await client.get("/api/character-tags/assignments")
    assert response.status_code == 400
    assert response.json() == {"error": "character_id is required"}
