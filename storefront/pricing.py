"""Cart pricing shared by the checkout endpoint and the client session.

All money is handled as ``Decimal`` and rounded HALF_UP, so the preview a
client shows and the total the server charges come out of the same function.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .errors import InvalidCartError
from .models import CartItem, PricingResult

FREE_SHIPPING_THRESHOLD = Decimal("199.90")
BASE_SHIPPING_FEE = Decimal("14.90")
ORDER_BUMP_PRICE = Decimal("9.90")

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def q2(value) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cart_subtotal(cart: Sequence[CartItem]) -> Decimal:
    return sum((item.price * item.qty for item in cart), ZERO)


def shipping_for(subtotal: Decimal) -> Decimal:
    # strictly above the threshold; exactly 199.90 still pays shipping
    return ZERO if subtotal > FREE_SHIPPING_THRESHOLD else BASE_SHIPPING_FEE


def compute_totals(cart: Sequence[CartItem], bump_added: bool = False) -> PricingResult:
    if not isinstance(cart, (list, tuple)) or not cart:
        raise InvalidCartError()
    if not all(isinstance(item, CartItem) for item in cart):
        raise InvalidCartError()

    subtotal = cart_subtotal(cart)
    shipping = shipping_for(subtotal)
    bump = ORDER_BUMP_PRICE if bump_added else ZERO
    total = q2(subtotal + shipping + bump)

    return PricingResult(
        subtotal=q2(subtotal),
        shipping_cost=shipping,
        bump_cost=bump,
        total=total,
        amount_in_cents=to_cents(total),
    )


def free_shipping_progress(subtotal: Decimal) -> tuple[Decimal, Decimal]:
    """
    How far a cart is from free shipping:
      (amount still missing, progress percentage capped at 100)
    """
    missing = max(ZERO, FREE_SHIPPING_THRESHOLD - subtotal)
    percent = min(Decimal("100"), subtotal / FREE_SHIPPING_THRESHOLD * 100)
    return q2(missing), q2(percent)
