"""Tests for commission rules: arithmetic, fallback lookup, caching and admin API."""

from decimal import Decimal
from unittest.mock import patch

from app.domain.commissions.calculator import ZERO_RATES, CommissionRates, compute_commission
from app.domain.commissions.service import CommissionService
from app.models import CommissionRule, PropertyType


def auth(user):
    return {"X-User-Id": str(user.id)}


def _rule(db, property_type_id=None, host_rate=0.1, host_fixed=0, client_rate=0.05, client_fixed=2, active=True):
    rule = CommissionRule(
        title="Standard" if property_type_id is None else f"Type {property_type_id}",
        host_commission_rate=host_rate,
        host_commission_fixed=host_fixed,
        client_commission_rate=client_rate,
        client_commission_fixed=client_fixed,
        property_type_id=property_type_id,
        is_active=active,
    )
    db.add(rule)
    db.commit()
    return rule


# --- compute_commission ---


def test_compute_commission():
    rates = CommissionRates(
        host_commission_rate=0.1,
        host_commission_fixed=1.5,
        client_commission_rate=0.05,
        client_commission_fixed=2,
        rule_id=1,
        scope="type",
    )
    result = compute_commission(200, rates)

    assert result.host_commission == Decimal("21.50")
    assert result.client_commission == Decimal("12.00")
    assert result.host_receives == Decimal("178.50")
    assert result.client_pays == Decimal("212.00")
    assert result.platform_revenue == Decimal("33.50")


def test_zero_rates_leave_amount_untouched():
    result = compute_commission("99.99", ZERO_RATES)
    assert result.host_receives == result.client_pays == Decimal("99.99")
    assert result.platform_revenue == 0


# --- rule resolution ---


def test_type_rule_wins_over_global(db, app_db, villa_type):
    _rule(db, None, host_rate=0.2)
    type_rule = _rule(db, villa_type.id, host_rate=0.1)

    rates = CommissionService(app_db).get_rule_for_type(villa_type.id)
    assert rates.rule_id == type_rule.id
    assert rates.scope == "type"
    assert rates.host_commission_rate == 0.1


def test_falls_back_to_global_rule(db, app_db, villa_type):
    global_rule = _rule(db, None, host_rate=0.2)
    _rule(db, villa_type.id, active=False)

    rates = CommissionService(app_db).get_rule_for_type(villa_type.id)
    assert rates.rule_id == global_rule.id
    assert rates.scope == "global"


def test_no_rule_means_zero_commission(app_db, villa_type):
    assert CommissionService(app_db).get_rule_for_type(villa_type.id) == ZERO_RATES


def test_cached_rates_skip_the_database(app_db, villa_type):
    cached = CommissionRates(host_commission_rate=0.3, rule_id=42, scope="type").to_cache()
    with patch("app.domain.commissions.service.get_commission_rule_cached", return_value=cached):
        rates = CommissionService(app_db).get_rule_for_type(villa_type.id)
    assert rates.rule_id == 42
    assert rates.host_commission_rate == 0.3


def test_calculate_for_stay(db, app_db, villa_type):
    _rule(db, villa_type.id, host_rate=0.1, host_fixed=0, client_rate=0.1, client_fixed=0)

    result = CommissionService(app_db).calculate_for_stay(100, 3, 40, villa_type.id)
    assert result.amount == Decimal("340.00")
    assert result.host_commission == Decimal("34.00")
    assert result.client_pays == Decimal("374.00")


# --- admin API ---


async def test_admin_creates_rule_and_invalidates_cache(client, admin, villa_type):
    with patch("app.domain.commissions.service.invalidate_commission_cache") as invalidate:
        resp = await client.post(
            "/admin/commissions",
            json={
                "title": "Villas",
                "hostCommissionRate": 0.12,
                "hostCommissionFixed": 0,
                "clientCommissionRate": 0.05,
                "clientCommissionFixed": 1,
                "propertyTypeId": villa_type.id,
            },
            headers=auth(admin),
        )
    assert resp.status_code == 201
    data = resp.json()
    assert data["propertyTypeName"] == "Villa"
    assert data["isActive"] is True
    invalidate.assert_called_once_with(villa_type.id)


async def test_one_rule_per_property_type(client, db, admin, villa_type):
    _rule(db, villa_type.id)
    resp = await client.post(
        "/admin/commissions",
        json={"title": "Duplicate", "propertyTypeId": villa_type.id},
        headers=auth(admin),
    )
    assert resp.status_code == 409


async def test_rates_outside_unit_interval_are_rejected(client, admin):
    resp = await client.post(
        "/admin/commissions",
        json={"title": "Greedy", "hostCommissionRate": 1.5},
        headers=auth(admin),
    )
    assert resp.status_code == 400


async def test_negative_fixed_fee_is_rejected(client, admin):
    resp = await client.post(
        "/admin/commissions",
        json={"title": "Refund", "clientCommissionFixed": -3},
        headers=auth(admin),
    )
    assert resp.status_code == 400


async def test_unknown_property_type(client, admin):
    resp = await client.post(
        "/admin/commissions",
        json={"title": "Ghost", "propertyTypeId": 999},
        headers=auth(admin),
    )
    assert resp.status_code == 404


async def test_host_cannot_manage_rules(client, host):
    resp = await client.get("/admin/commissions", headers=auth(host))
    assert resp.status_code == 403


async def test_update_moves_rule_to_another_type(client, db, admin, villa_type):
    rule = _rule(db, villa_type.id)
    bungalow = PropertyType(name="Bungalow")
    db.add(bungalow)
    db.commit()

    resp = await client.put(
        f"/admin/commissions/{rule.id}",
        json={"propertyTypeId": bungalow.id, "hostCommissionRate": 0.2},
        headers=auth(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["propertyTypeId"] == bungalow.id
    assert resp.json()["hostCommissionRate"] == 0.2


async def test_delete_rule(client, db, admin, villa_type):
    rule = _rule(db, villa_type.id)
    resp = await client.delete(f"/admin/commissions/{rule.id}", headers=auth(admin))
    assert resp.json() == {"success": True}

    listed = await client.get("/admin/commissions", headers=auth(admin))
    assert listed.json() == []


async def test_calculate_endpoint_uses_property_type(client, db, villa, guest):
    _rule(db, villa.type_id, host_rate=0.1, host_fixed=0, client_rate=0.05, client_fixed=0)

    resp = await client.post(
        "/commissions/calculate",
        json={"basePrice": 100, "numberOfNights": 2, "propertyId": villa.id},
        headers=auth(guest),
    )
    data = resp.json()
    assert data["basePrice"] == 200
    assert data["hostCommission"] == 20
    assert data["clientCommission"] == 10
    assert data["hostReceives"] == 180
    assert data["clientPays"] == 210
    assert data["breakdown"]["scope"] == "type"
