"""Tests for the extras catalogue."""


def auth(user):
    return {"X-User-Id": str(user.id)}


async def test_host_creates_extra_on_own_property(client, villa, host):
    resp = await client.post(
        "/extras",
        json={"name": " Breakfast ", "priceEUR": 20, "priceMGA": 90000, "type": "PER_PERSON", "propertyIds": [villa.id]},
        headers=auth(host),
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Breakfast"
    assert data["isGlobal"] is False
    assert data["ownerId"] == host.id
    assert data["propertyIds"] == [villa.id]

    listed = await client.get(f"/extras?propertyId={villa.id}", headers=auth(host))
    assert [e["name"] for e in listed.json()] == ["Breakfast"]


async def test_only_admins_create_global_extras(client, host, admin):
    payload = {"name": "Cleaning", "priceEUR": 40, "isGlobal": True}

    denied = await client.post("/extras", json=payload, headers=auth(host))
    assert denied.status_code == 403

    created = await client.post("/extras", json=payload, headers=auth(admin))
    assert created.status_code == 201
    assert created.json()["isGlobal"] is True
    assert created.json()["type"] == "PER_BOOKING"


async def test_cannot_attach_extra_to_foreign_property(client, villa, other_host):
    resp = await client.post(
        "/extras",
        json={"name": "Kayak", "priceEUR": 15, "propertyIds": [villa.id]},
        headers=auth(other_host),
    )
    assert resp.status_code == 403


async def test_negative_price_is_rejected(client, host):
    resp = await client.post("/extras", json={"name": "Refund", "priceEUR": -5}, headers=auth(host))
    assert resp.status_code == 400


async def test_only_owner_edits_extra(client, host, other_host):
    created = await client.post("/extras", json={"name": "Parking", "priceEUR": 10}, headers=auth(host))
    extra_id = created.json()["id"]

    denied = await client.put(f"/extras/{extra_id}", json={"priceEUR": 1}, headers=auth(other_host))
    assert denied.status_code == 403

    updated = await client.put(
        f"/extras/{extra_id}", json={"priceEUR": 12, "type": "PER_DAY"}, headers=auth(host)
    )
    assert updated.json()["priceEUR"] == 12
    assert updated.json()["type"] == "PER_DAY"

    deleted = await client.delete(f"/extras/{extra_id}", headers=auth(host))
    assert deleted.json() == {"success": True}
