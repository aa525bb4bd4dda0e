# tests/test_pricing.py

from datetime import datetime, timedelta, timezone

import pytest

from app.models.discount import Discount
from app.schemas.order import CartItem
from app.services import pricing

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _discount(code="SAVE10", type="percentage", value=10.0, min_purchase=0.0,
              max_uses=None, used_count=0, active=True, expires_at=None) -> Discount:
    # Объект не сохраняется в БД, поэтому все поля задаем явно
    return Discount(
        id=1, code=code, type=type, value=value, min_purchase=min_purchase,
        max_uses=max_uses, used_count=used_count, active=active, expires_at=expires_at,
    )


def test_cart_total_sums_price_times_qty():
    items = [CartItem(name="Essay", price=12.5, qty=2), CartItem(name="Quiz", price=3.99, qty=1)]
    assert pricing.cart_total(items) == pytest.approx(28.99)


def test_credits_then_percentage_discount_post_credit():
    price = pricing.price_total(20, credits=5, discount=_discount(), discount_code="save10",
                                now=NOW, discount_base=pricing.POST_CREDIT)

    assert price.credits_used == 5
    assert price.discount_amount == pytest.approx(1.5)
    assert price.final_total == pytest.approx(13.5)
    assert price.discount_code == "SAVE10"
    assert price.discount_applied


def test_percentage_discount_pre_credit_uses_raw_total():
    price = pricing.price_total(20, credits=5, discount=_discount(), discount_code="SAVE10",
                                now=NOW, discount_base=pricing.PRE_CREDIT)

    assert price.discount_amount == pytest.approx(2.0)
    assert price.final_total == pytest.approx(13.0)


def test_default_discount_base_comes_from_settings(monkeypatch):
    monkeypatch.setattr(pricing.settings, "DISCOUNT_BASE", pricing.PRE_CREDIT)
    price = pricing.price_total(20, credits=5, discount=_discount(), discount_code="SAVE10", now=NOW)
    assert price.discount_amount == pytest.approx(2.0)


def test_small_total_is_raised_to_minimum_charge():
    price = pricing.price_total(0.30, now=NOW)
    assert price.final_total == pytest.approx(0.50)


def test_credits_covering_whole_order_still_charge_minimum():
    price = pricing.price_total(20, credits=30, now=NOW)

    assert price.credits_used == 20
    assert price.final_total == pytest.approx(0.50)


def test_exhausted_discount_is_rejected_without_changing_total():
    price = pricing.price_total(20, discount=_discount(max_uses=1, used_count=1), discount_code="SAVE10", now=NOW)

    assert price.discount_rejection == pricing.DISCOUNT_LIMIT_REACHED
    assert price.discount_amount == 0
    assert price.final_total == 20
    assert not price.discount_applied


def test_expired_discount_is_rejected():
    discount = _discount(expires_at=NOW - timedelta(minutes=1))
    price = pricing.price_total(20, discount=discount, discount_code="SAVE10", now=NOW)
    assert price.discount_rejection == pricing.DISCOUNT_EXPIRED


def test_naive_expiry_is_treated_as_utc():
    discount = _discount(expires_at=(NOW + timedelta(hours=1)).replace(tzinfo=None))
    price = pricing.price_total(20, discount=discount, discount_code="SAVE10", now=NOW)
    assert price.discount_applied


@pytest.mark.parametrize("discount", [None, _discount(active=False)])
def test_unknown_or_inactive_discount_is_not_found(discount):
    price = pricing.price_total(20, discount=discount, discount_code="NOPE", now=NOW)
    assert price.discount_rejection == pricing.DISCOUNT_NOT_FOUND


def test_minimum_purchase_checked_against_discount_base():
    discount = _discount(min_purchase=18)

    post = pricing.price_total(20, credits=5, discount=discount, discount_code="SAVE10",
                               now=NOW, discount_base=pricing.POST_CREDIT)
    pre = pricing.price_total(20, credits=5, discount=discount, discount_code="SAVE10",
                              now=NOW, discount_base=pricing.PRE_CREDIT)

    assert post.discount_rejection == "Minimum purchase of £18.00 required"
    assert pre.discount_applied


def test_fixed_discount_is_capped_at_remaining_total():
    price = pricing.price_total(20, credits=16, discount=_discount(type="fixed", value=10),
                                discount_code="SAVE10", now=NOW)

    assert price.discount_amount == pytest.approx(4.0)
    assert price.final_total == pytest.approx(0.50)


def test_no_code_means_no_rejection():
    price = pricing.price_total(20, now=NOW)

    assert price.discount_code is None
    assert price.discount_rejection is None
    assert price.final_total == 20


@pytest.mark.parametrize("raw_total", [0, 0.3, 4.99, 20, 149.5])
@pytest.mark.parametrize("credits", [0, 2.5, 30])
@pytest.mark.parametrize("discount", [
    _discount(),
    _discount(type="fixed", value=7),
    _discount(type="percentage", value=100),
])
def test_resolver_bounds(raw_total, credits, discount):
    for base in (pricing.POST_CREDIT, pricing.PRE_CREDIT):
        price = pricing.price_total(raw_total, credits=credits, discount=discount,
                                    discount_code=discount.code, now=NOW, discount_base=base)

        assert price.final_total >= 0.50
        assert price.credits_used <= min(credits, raw_total)
        assert price.discount_amount <= round(raw_total - price.credits_used, 2) + 1e-9
        assert price.discount_amount >= 0


def test_quote_uses_cart_items():
    items = [CartItem(name="Essay", price=10, qty=2)]
    price = pricing.quote(items, credits=5, discount=_discount(), discount_code="SAVE10",
                          now=NOW, discount_base=pricing.POST_CREDIT)

    assert price.raw_total == 20
    assert price.final_total == pytest.approx(13.5)
