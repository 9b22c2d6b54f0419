from decimal import Decimal

import pytest

from storefront.errors import InvalidCartError
from storefront.models import CartItem
from storefront.pricing import (
    BASE_SHIPPING_FEE,
    ORDER_BUMP_PRICE,
    compute_totals,
    free_shipping_progress,
    to_cents,
)


def item(price, qty=1, item_id="p1"):
    return CartItem(id=item_id, name="Produto", price=price, qty=qty)


def test_single_item_pays_shipping():
    res = compute_totals([item("87.00")])

    assert res.subtotal == Decimal("87.00")
    assert res.shipping_cost == Decimal("14.90")
    assert res.bump_cost == Decimal("0.00")
    assert res.total == Decimal("101.90")
    assert res.amount_in_cents == 10190


def test_subtotal_at_threshold_still_pays_shipping():
    res = compute_totals([item("199.90")])

    assert res.shipping_cost == BASE_SHIPPING_FEE
    assert res.total == Decimal("214.80")


def test_float_price_at_threshold_is_not_free():
    res = compute_totals([item(199.9)])
    assert res.shipping_cost == Decimal("14.90")


def test_subtotal_above_threshold_ships_free():
    res = compute_totals([item("89.90", qty=2), item("34.90", item_id="p2")])

    # 179.80 + 34.90 = 214.70
    assert res.subtotal == Decimal("214.70")
    assert res.shipping_cost == Decimal("0.00")
    assert res.total == Decimal("214.70")
    assert res.amount_in_cents == 21470


def test_bump_is_flat_regardless_of_cart():
    small = compute_totals([item("10.00")], bump_added=True)
    large = compute_totals([item("500.00")], bump_added=True)

    assert small.bump_cost == ORDER_BUMP_PRICE == Decimal("9.90")
    assert large.bump_cost == Decimal("9.90")
    assert small.total == Decimal("34.80")
    assert large.total == Decimal("509.90")


@pytest.mark.parametrize("prices,bump", [
    (["0.01"], False),
    (["87.00", "87.00"], True),
    (["33.33", "33.33", "33.33"], False),
    (["199.91"], True),
])
def test_total_never_below_subtotal(prices, bump):
    cart = [item(p, item_id=f"p{i}") for i, p in enumerate(prices)]
    res = compute_totals(cart, bump)
    assert res.total >= res.subtotal


def test_repeated_calls_are_stable():
    cart = [item("0.10", qty=3), item("33.33", qty=3, item_id="p2")]
    results = {compute_totals(cart, True).amount_in_cents for _ in range(50)}
    # 0.30 + 99.99 + 14.90 + 9.90
    assert results == {12509}


def test_empty_cart_raises():
    with pytest.raises(InvalidCartError):
        compute_totals([])


def test_non_sequence_cart_raises():
    with pytest.raises(InvalidCartError):
        compute_totals({"id": "p1", "price": "1.00"})


def test_to_cents_rounds_half_up():
    assert to_cents(Decimal("1.005")) == 101
    assert to_cents(Decimal("0.004")) == 0
    assert to_cents("87.00") == 8700


def test_free_shipping_progress():
    missing, percent = free_shipping_progress(Decimal("99.95"))
    assert missing == Decimal("99.95")
    assert percent == Decimal("50.00")

    missing, percent = free_shipping_progress(Decimal("250.00"))
    assert missing == Decimal("0.00")
    assert percent == Decimal("100.00")
