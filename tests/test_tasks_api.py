import asyncio


async def _create(client, title, due="2025-03-01"):
    r = await client.post("/api/tasks", json={"title": title, "due": due})
    assert r.status_code == 201
    return r.json()


async def _toggle(client, task_id, dependency):
    return await client.patch(f"/api/tasks/{task_id}/dependencies", json={"dependency": dependency})


async def test_create_and_list(client):
    a = await _create(client, "Design")
    b = await _create(client, "Build", "2025-03-10")
    r = await client.get("/api/tasks")
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [b["id"], a["id"]]
    assert r.json()[0]["due"] == "2025-03-10"


async def test_create_validation(client):
    r = await client.post("/api/tasks", json={"title": "   ", "due": "2025-03-01"})
    assert r.status_code == 400
    assert r.json() == {"error": "Title is required"}
    r = await client.post("/api/tasks", json={"title": "Design"})
    assert r.status_code == 400
    assert r.json() == {"error": "Due date is required"}
    r = await client.post("/api/tasks", json={"title": "Design", "due": "next week"})
    assert r.status_code == 400
    r = await client.post("/api/tasks", json={"title": "Design", "due": "2025-03-01garbage"})
    assert r.status_code == 400
    assert (await client.get("/api/tasks")).json() == []
    r = await client.post("/api/tasks", json={"title": "Design", "due": "2025-03-01T09:30:00Z"})
    assert r.status_code == 201
    assert r.json()["due"] == "2025-03-01"


async def test_invalid_and_missing_ids(client):
    assert (await client.get("/api/tasks/abc")).status_code == 400
    assert (await client.delete("/api/tasks/abc")).status_code == 400
    assert (await client.get("/api/tasks/7")).status_code == 404
    assert (await client.delete("/api/tasks/7")).status_code == 404
    assert (await _toggle(client, 7, 1)).status_code == 404


async def test_toggle_dependency_flow(client):
    design = await _create(client, "Design")
    build = await _create(client, "Build")
    test = await _create(client, "Test")

    r = await _toggle(client, build["id"], design["id"])
    assert r.status_code == 200
    assert r.json()["dependencies"] == [design["id"]]
    r = await _toggle(client, test["id"], build["id"])
    assert r.json()["dependencies"] == [build["id"]]

    r = await _toggle(client, design["id"], test["id"])
    assert r.status_code == 400
    assert r.json()["reason"] == "CycleDetected"

    r = await _toggle(client, design["id"], design["id"])
    assert r.status_code == 400
    assert r.json()["reason"] == "SelfDependency"

    r = await _toggle(client, design["id"], 999)
    assert r.status_code == 400
    assert r.json()["reason"] == "InvalidReference"

    r = await _toggle(client, design["id"], "2")
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid dependency ID"

    # toggling again removes the edge
    r = await _toggle(client, test["id"], build["id"])
    assert r.json()["dependencies"] == []


async def test_toggle_twice_restores_edges(client):
    a = await _create(client, "A")
    b = await _create(client, "B")
    before = (await client.get(f"/api/tasks/{b['id']}")).json()["dependencies"]
    await _toggle(client, b["id"], a["id"])
    await _toggle(client, b["id"], a["id"])
    assert (await client.get(f"/api/tasks/{b['id']}")).json()["dependencies"] == before


async def test_concurrent_opposite_toggles_cannot_close_a_cycle(client):
    a = await _create(client, "A")
    b = await _create(client, "B")
    r1, r2 = await asyncio.gather(_toggle(client, a["id"], b["id"]), _toggle(client, b["id"], a["id"]))
    assert sorted([r1.status_code, r2.status_code]) == [200, 400]
    r = await client.get("/api/graph/schedule")
    assert r.json()["valid"] is True


async def test_delete_detaches_dependents(client):
    design = await _create(client, "Design")
    build = await _create(client, "Build")
    await _toggle(client, build["id"], design["id"])
    r = await client.delete(f"/api/tasks/{design['id']}")
    assert r.status_code == 200
    assert (await client.get(f"/api/tasks/{build['id']}")).json()["dependencies"] == []


async def test_dependency_chain(client):
    design = await _create(client, "Design", "2025-03-01")
    build = await _create(client, "Build", "2025-03-10")
    test = await _create(client, "Test", "2025-03-20")
    await _toggle(client, build["id"], design["id"])
    await _toggle(client, test["id"], build["id"])

    r = await client.get(f"/api/tasks/{test['id']}/chain")
    assert r.status_code == 200
    body = r.json()
    assert [t["id"] for t in body["chain"]] == [design["id"], build["id"], test["id"]]
    assert body["schedulingBound"] == "2025-03-10"
    assert body["graph"]["criticalPath"] == [design["id"], build["id"], test["id"]]

    assert (await client.get("/api/tasks/99/chain")).status_code == 404


async def test_image_lookup_disabled_returns_null(client):
    t = await _create(client, "Design")
    r = await client.get(f"/api/tasks/{t['id']}/image")
    assert r.json() == {"url": None}
