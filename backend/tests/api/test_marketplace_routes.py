"""Marketplace Routes: items, swaps, conversations and badges over HTTP.

Tests cover:
    - Multipart item upload with image validation and quota
    - Full propose -> accept -> chat -> withdraw flow with status codes
    - Domain errors mapped to their HTTP statuses and error codes
"""


async def test_upload_item_and_list_mine(client, sign_up, upload_item):
    _, headers = await sign_up("Alice")
    res = await upload_item(headers, "Guitar", images=2)
    assert res.status_code == 201, res.text
    item = res.json()
    assert item["status"] == "active"
    assert len(item["images"]) == 2
    assert item["images"][0].startswith("data:image/png;base64,")
    assert item["city"] == "Winnipeg"

    res = await client.get("/api/v1/items/mine", headers=headers)
    assert [it["id"] for it in res.json()] == [item["id"]]


async def test_upload_without_images_is_400(client, sign_up, upload_item):
    _, headers = await sign_up("Alice")
    res = await upload_item(headers, images=0)
    assert res.status_code == 400


async def test_oversized_image_is_413(client, sign_up, upload_item):
    _, headers = await sign_up("Alice")
    res = await upload_item(headers, size=4_096)
    assert res.status_code == 413
    assert res.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"


async def test_fourth_item_is_409(client, sign_up, upload_item):
    _, headers = await sign_up("Alice")
    for n in range(3):
        assert (await upload_item(headers, f"Thing {n}")).status_code == 201
    res = await upload_item(headers, "Thing 3")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "LIMIT_EXCEEDED"


async def test_unknown_item_is_404(client, sign_up):
    _, headers = await sign_up("Alice")
    res = await client.get("/api/v1/items/i_missing", headers=headers)
    assert res.status_code == 404


async def test_swap_flow(client, sign_up, upload_item):
    alice, alice_h = await sign_up("Alice")
    _, bob_h = await sign_up("Bob")
    guitar = (await upload_item(alice_h, "Guitar")).json()
    bike = (await upload_item(bob_h, "Bicycle")).json()

    res = await client.get(f"/api/v1/items/{bike['id']}/offerable", headers=alice_h)
    assert [it["id"] for it in res.json()] == [guitar["id"]]

    res = await client.post("/api/v1/swaps", json={
        "offered_item_id": guitar["id"], "requested_item_id": bike["id"],
    }, headers=alice_h)
    assert res.status_code == 201
    swap = res.json()
    assert swap["status"] == "pending"

    badges = (await client.get("/api/v1/badges", headers=bob_h)).json()
    assert badges == {"pending_incoming": 1, "unread": 0}

    res = await client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=alice_h)
    assert res.status_code == 403

    res = await client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_h)
    assert res.status_code == 200
    assert res.json()["status"] == "accepted"

    res = await client.delete(f"/api/v1/items/{bike['id']}", headers=bob_h)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "ITEM_LOCKED"

    res = await client.post(
        f"/api/v1/conversations/{swap['id']}/messages",
        json={"text": "Saturday?"}, headers=alice_h,
    )
    assert res.status_code == 201

    convs = (await client.get("/api/v1/conversations", headers=bob_h)).json()
    assert convs[0]["other_user_id"] == alice
    assert convs[0]["other_name"] == "Alice"
    assert convs[0]["last_message"]["text"] == "Saturday?"
    assert (await client.get("/api/v1/badges", headers=bob_h)).json()["unread"] == 1

    res = await client.post(f"/api/v1/swaps/{swap['id']}/withdraw", headers=alice_h)
    assert res.json()["status"] == "withdrawn"

    res = await client.post(
        f"/api/v1/conversations/{swap['id']}/messages",
        json={"text": "never mind"}, headers=bob_h,
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "NOT_ACCEPTED"

    res = await client.get(f"/api/v1/conversations/{swap['id']}/messages", headers=bob_h)
    assert [m["text"] for m in res.json()] == ["Saturday?"]

    res = await client.get("/api/v1/health/locks", headers=bob_h)
    assert res.json() == []


async def test_lock_audit_requires_sign_in(client):
    res = await client.get("/api/v1/health/locks")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTH_ERROR"


async def test_second_action_on_resolved_swap_is_409(client, sign_up, upload_item):
    _, alice_h = await sign_up("Alice")
    _, bob_h = await sign_up("Bob")
    guitar = (await upload_item(alice_h, "Guitar")).json()
    bike = (await upload_item(bob_h, "Bicycle")).json()
    swap = (await client.post("/api/v1/swaps", json={
        "offered_item_id": guitar["id"], "requested_item_id": bike["id"],
    }, headers=alice_h)).json()

    assert (await client.post(f"/api/v1/swaps/{swap['id']}/reject", headers=bob_h)).status_code == 200
    res = await client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_h)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_STATE"


async def test_swap_with_own_item_is_400(client, sign_up, upload_item):
    _, headers = await sign_up("Alice")
    a1 = (await upload_item(headers, "One")).json()
    a2 = (await upload_item(headers, "Two")).json()
    res = await client.post("/api/v1/swaps", json={
        "offered_item_id": a1["id"], "requested_item_id": a2["id"],
    }, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_SWAP"


async def test_stranger_cannot_view_swap(client, sign_up, upload_item):
    _, alice_h = await sign_up("Alice")
    _, bob_h = await sign_up("Bob")
    _, carol_h = await sign_up("Carol")
    guitar = (await upload_item(alice_h, "Guitar")).json()
    bike = (await upload_item(bob_h, "Bicycle")).json()
    swap = (await client.post("/api/v1/swaps", json={
        "offered_item_id": guitar["id"], "requested_item_id": bike["id"],
    }, headers=alice_h)).json()

    res = await client.get(f"/api/v1/swaps/{swap['id']}", headers=carol_h)
    assert res.status_code == 403
    res = await client.get("/api/v1/swaps/outgoing", headers=alice_h)
    assert [s["id"] for s in res.json()] == [swap["id"]]


async def test_liveness_and_readiness(client):
    assert (await client.get("/api/v1/health/")).status_code == 200
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["store"] == "healthy"
