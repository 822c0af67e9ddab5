from sqlalchemy import select

from vendorhub.models.audit_log import AuditLog
from vendorhub.services.vendor_records import create_vendor


async def _build_schema(client, headers):
    r = await client.post(
        "/v1/admin/form-schema/sections",
        headers=headers,
        json={"expected_version": 0, "id": "basics", "label": "Restaurant Information"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["version"] == 1

    r = await client.post(
        "/v1/admin/form-schema/sections/basics/fields",
        headers=headers,
        json={
            "expected_version": 1,
            "id": "restaurantName",
            "label": "Restaurant name",
            "type": "text",
            "required": True,
            "rules": {"min_length": 2},
        },
    )
    assert r.status_code == 200, r.text

    r = await client.post(
        "/v1/admin/form-schema/sections",
        headers=headers,
        json={"expected_version": 2, "id": "pricing", "label": "Pricing"},
    )
    assert r.status_code == 200, r.text

    r = await client.post(
        "/v1/admin/form-schema/sections/pricing/fields",
        headers=headers,
        json={
            "expected_version": 3,
            "id": "minimumOrderPrice",
            "label": "Minimum order price",
            "type": "number",
            "required": True,
            "rules": {"min_value": 0, "max_value": 10000},
        },
    )
    assert r.status_code == 200, r.text
    return r.json()


async def _seed_vendor(db_session, form_data):
    v = await create_vendor(db_session, vendor_type="restaurant", agent_id="agt_1", form_data=form_data)
    await db_session.commit()
    return v.id


async def test_admin_routes_require_internal_key(client):
    r = await client.get("/v1/admin/form-schema")
    assert r.status_code == 403

    r = await client.get("/v1/admin/vendors", headers={"X-Internal-Admin-Key": "wrong"})
    assert r.status_code == 403


async def test_schema_authoring_and_stale_writes(client, admin_headers):
    doc = await _build_schema(client, admin_headers)

    assert doc["version"] == 4
    assert [s["id"] for s in doc["sections"]] == ["basics", "pricing"]

    # a second admin still editing version 3
    r = await client.post(
        "/v1/admin/form-schema/sections",
        headers=admin_headers,
        json={"expected_version": 3, "id": "location", "label": "Location"},
    )
    assert r.status_code == 409, r.text
    assert r.json()["code"] == "stale_schema"

    r = await client.put(
        "/v1/admin/form-schema/sections:reorder",
        headers=admin_headers,
        json={"expected_version": 4, "ids": ["pricing", "basics"]},
    )
    assert r.status_code == 200, r.text
    assert [(s["id"], s["order"]) for s in r.json()["sections"]] == [("pricing", 1), ("basics", 2)]

    r = await client.post(
        "/v1/admin/form-schema/sections/pricing/fields",
        headers=admin_headers,
        json={"expected_version": 5, "id": "tags", "label": "Tags", "type": "enum_multi"},
    )
    assert r.status_code == 422, r.text
    assert r.json()["code"] == "invalid_schema"

    # history stays readable
    r = await client.get("/v1/admin/form-schema?version=1", headers=admin_headers)
    assert r.status_code == 200
    assert [s["id"] for s in r.json()["sections"]] == ["basics"]

    r = await client.get("/v1/admin/form-schema?version=42", headers=admin_headers)
    assert r.status_code == 404


async def test_vendor_view_edit_and_review(client, db_session, admin_headers):
    await _build_schema(client, admin_headers)
    vendor_id = await _seed_vendor(db_session, {"restaurantName": "Spice Route", "city": "Mumbai"})

    r = await client.get(f"/v1/admin/vendors/{vendor_id}", headers=admin_headers)
    assert r.status_code == 200, r.text
    view = r.json()
    assert view["missing"] == ["minimumOrderPrice"]
    assert view["values"]["id"] == vendor_id
    assert view["values"]["status"] == "pending"
    assert view["values"]["city"] == "Mumbai"

    r = await client.patch(
        f"/v1/admin/vendors/{vendor_id}",
        headers=admin_headers,
        json={"values": {"minimumOrderPrice": "50", "restaurantName": "Spice Route"}},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["changed"] == ["minimumOrderPrice"]
    assert body["vendor"]["values"]["minimumOrderPrice"] == 50
    assert body["vendor"]["missing"] == []

    r = await client.patch(
        f"/v1/admin/vendors/{vendor_id}",
        headers=admin_headers,
        json={"values": {"minimumOrderPrice": "-3", "restaurantName": "S"}},
    )
    assert r.status_code == 422, r.text
    err = r.json()
    assert err["code"] == "validation_failed"
    assert {(d["field_id"], d["rule"]) for d in err["details"]} == {
        ("minimumOrderPrice", "min_value"),
        ("restaurantName", "min_length"),
    }

    r = await client.patch(f"/v1/admin/vendors/{vendor_id}/status", headers=admin_headers, json={"status": "approved"})
    assert r.status_code == 200, r.text
    assert r.json()["values"]["status"] == "approved"

    r = await client.patch(f"/v1/admin/vendors/{vendor_id}/status", headers=admin_headers, json={"status": "rejected"})
    assert r.status_code == 409

    r = await client.get("/v1/admin/vendors?status=approved&city=mumbai", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["total"] == 1

    r = await client.get("/v1/admin/vendors/summary", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["summary"] == {"total": 1, "pending": 0, "approved": 1, "rejected": 0}

    r = await client.get("/v1/admin/vendors/vnd_missing", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


async def test_edit_request_flow(client, db_session, admin_headers):
    await _build_schema(client, admin_headers)
    vendor_id = await _seed_vendor(db_session, {"restaurantName": "Spice Route", "minimumOrderPrice": 100})

    url = f"/v1/vendors/{vendor_id}/edit-requests"

    # pending applications cannot be edited yet
    r = await client.post(url, headers=admin_headers, json={"values": {"minimumOrderPrice": "150"}})
    assert r.status_code == 409

    r = await client.patch(f"/v1/admin/vendors/{vendor_id}/status", headers=admin_headers, json={"status": "approved"})
    assert r.status_code == 200, r.text

    r = await client.post(url, headers=admin_headers, json={"values": {"minimumOrderPrice": "100"}})
    assert r.status_code == 200, r.text
    assert r.json() == {"created": False, "request": None}

    r = await client.post(url, headers=admin_headers, json={"values": {"minimumOrderPrice": "150"}})
    assert r.status_code == 200, r.text
    req = r.json()["request"]
    assert req["changes"] == {"minimumOrderPrice": 150}
    assert req["review_state"] == "pending"

    r = await client.get("/v1/admin/edit-requests", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["unread_count"] == 1
    assert [i["id"] for i in r.json()["items"]] == [req["id"]]

    r = await client.post("/v1/admin/edit-requests:mark-seen", headers=admin_headers, json={"ids": [req["id"]]})
    assert r.json() == {"modified": 1, "unread_count": 0}
    r = await client.post("/v1/admin/edit-requests:mark-seen", headers=admin_headers, json={"ids": [req["id"]]})
    assert r.json() == {"modified": 0, "unread_count": 0}

    r = await client.post(f"/v1/admin/edit-requests/{req['id']}:approve", headers=admin_headers, json={"remark": "ok"})
    assert r.status_code == 200, r.text
    reviewed = r.json()
    assert reviewed["review_state"] == "approved"
    assert reviewed["seen"] is True
    assert reviewed["reviewed_by"] == "adm_test"

    r = await client.post(f"/v1/admin/edit-requests/{req['id']}:reject", headers=admin_headers, json={})
    assert r.status_code == 409
    assert r.json()["details"][0]["current"] == "approved"

    r = await client.get(f"/v1/admin/vendors/{vendor_id}", headers=admin_headers)
    assert r.json()["values"]["minimumOrderPrice"] == 150

    r = await client.get("/v1/admin/edit-requests", headers=admin_headers)
    assert r.json()["items"] == []

    actions = (await db_session.execute(
        select(AuditLog.action).where(AuditLog.target_type == "edit_request")
    )).scalars().all()
    assert sorted(actions) == ["edit_request.approved", "edit_request.submitted"]
