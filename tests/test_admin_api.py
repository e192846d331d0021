import pytest


async def submit(client, headers, description, category="maintenance"):
    response = await client.post(
        "/api/v1/complaints/",
        json={"description": description, "category": category},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_admin_endpoints_require_admin(client, student_headers):
    response = await client.get("/api/v1/admin/complaints", headers=student_headers)
    assert response.status_code == 403

    response = await client.get("/api/v1/admin/stats", headers=student_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_lists_and_filters_all_complaints(client, student_headers, other_headers, admin_headers):
    drip = await submit(client, student_headers, "The tap in my bathroom drips slowly", "water")
    sparks = await submit(client, other_headers, "There is a short circuit and sparks near my bed", "electricity")

    response = await client.get("/api/v1/admin/complaints", headers=admin_headers)
    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [sparks, drip]

    response = await client.get("/api/v1/admin/complaints?urgency=high", headers=admin_headers)
    assert [item["id"] for item in response.json()["items"]] == [sparks]

    response = await client.get("/api/v1/admin/complaints?category=water", headers=admin_headers)
    assert [item["id"] for item in response.json()["items"]] == [drip]

    response = await client.get("/api/v1/admin/complaints?search=ben", headers=admin_headers)
    assert [item["id"] for item in response.json()["items"]] == [sparks]

    response = await client.get(f"/api/v1/admin/complaints/{drip}", headers=admin_headers)
    assert response.json()["user_name"] == "Ada Student"


@pytest.mark.asyncio
async def test_status_workflow(client, student_headers, admin_headers):
    complaint_id = await submit(client, student_headers, "The corridor light flickers at night")

    response = await client.put(
        f"/api/v1/admin/complaints/{complaint_id}/status",
        json={"status": "in_progress", "admin_notes": "Electrician booked"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
    assert response.json()["admin_notes"] == "Electrician booked"

    # Students can no longer cancel once work has started
    response = await client.post(f"/api/v1/complaints/{complaint_id}/cancel", headers=student_headers)
    assert response.status_code == 409

    response = await client.put(
        f"/api/v1/admin/complaints/{complaint_id}/status",
        json={"status": "resolved"},
        headers=admin_headers,
    )
    assert response.json()["status"] == "resolved"

    response = await client.put(
        f"/api/v1/admin/complaints/{complaint_id}/status",
        json={"status": "pending"},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_complaint(client, admin_headers):
    response = await client.put(
        "/api/v1/admin/complaints/9999/status",
        json={"status": "resolved"},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["code"] == "complaint_not_found"


@pytest.mark.asyncio
async def test_stats(client, student_headers, admin_headers):
    await submit(client, student_headers, "The tap in my bathroom drips slowly", "water")
    await submit(client, student_headers, "There is a short circuit and sparks near my bed", "electricity")

    response = await client.get("/api/v1/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_complaints"] == 2
    assert stats["pending"] == 2
    assert stats["high_urgency"] == 1
    assert stats["by_category"]["water"] == 1
    assert stats["by_category"]["electricity"] == 1
