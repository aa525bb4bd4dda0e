# tests/test_discount_validation.py

import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.models.discount import Discount

pytestmark = pytest.mark.asyncio

VALIDATE_URL = "/api/discount/validate"


async def test_guest_validation_returns_amount(client: AsyncClient, save10: Discount, db_session):
    response = await client.post(VALIDATE_URL, json={"code": "save10", "total": 20})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "discount": {"code": "SAVE10", "type": "percentage", "value": 10.0, "amount": 2.0},
    }
    # Проверка ничего не резервирует
    db_session.refresh(save10)
    assert save10.used_count == 0


async def test_validation_for_user_matches_checkout_post_credit(
    client: AsyncClient,
    save10: Discount,
    user_auth_headers: dict
):
    response = await client.post(VALIDATE_URL, json={"code": "SAVE10", "total": 20}, headers=user_auth_headers)

    assert response.status_code == 200
    assert response.json()["discount"]["amount"] == pytest.approx(1.5)


async def test_validation_for_user_pre_credit(
    client: AsyncClient,
    save10: Discount,
    user_auth_headers: dict,
    monkeypatch
):
    monkeypatch.setattr(settings, "DISCOUNT_BASE", "pre_credit")

    response = await client.post(VALIDATE_URL, json={"code": "SAVE10", "total": 20}, headers=user_auth_headers)

    assert response.status_code == 200
    assert response.json()["discount"]["amount"] == pytest.approx(2.0)


async def test_fixed_discount_capped_at_total(client: AsyncClient, discount_factory):
    discount_factory(code="TENOFF", type="fixed", value=10)

    response = await client.post(VALIDATE_URL, json={"code": "TENOFF", "total": 6})

    assert response.status_code == 200
    assert response.json()["discount"]["amount"] == pytest.approx(6.0)


@pytest.mark.parametrize("code", ["MISSING", "OFF"])
async def test_unknown_or_inactive_code(client: AsyncClient, discount_factory, code: str):
    discount_factory(code="OFF", active=False)

    response = await client.post(VALIDATE_URL, json={"code": code, "total": 20})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Invalid discount code"}


async def test_expired_code(client: AsyncClient, expired_discount: Discount):
    response = await client.post(VALIDATE_URL, json={"code": "OLD5", "total": 20})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Discount code expired"}


async def test_exhausted_code(client: AsyncClient, discount_factory):
    discount_factory(code="ONCE", max_uses=1, used_count=1)

    response = await client.post(VALIDATE_URL, json={"code": "ONCE", "total": 20})

    assert response.status_code == 400
    assert response.json()["error"] == "Discount code limit reached"


async def test_minimum_purchase(client: AsyncClient, discount_factory):
    discount_factory(code="BIG", min_purchase=50)

    response = await client.post(VALIDATE_URL, json={"code": "BIG", "total": 20})

    assert response.status_code == 400
    assert response.json()["error"] == "Minimum purchase of £50.00 required"
