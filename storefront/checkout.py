import logging
from typing import Any

from pydantic import ValidationError

from . import settings
from .catalog import reprice_cart
from .errors import InvalidCartError, InvalidRequestError, StorefrontError, UnexpectedError
from .gateway import GhostsPayClient
from .models import CheckoutRequest, CheckoutResponse
from .pricing import compute_totals

logger = logging.getLogger(__name__)


def validate_checkout(body: Any) -> CheckoutRequest:
    if not isinstance(body, dict):
        raise InvalidRequestError()

    cart = body.get("cart")
    if not isinstance(cart, list) or not cart:
        raise InvalidCartError()

    try:
        return CheckoutRequest.model_validate(body)
    except ValidationError as exc:
        if any(err["loc"] and err["loc"][0] == "cart" for err in exc.errors()):
            raise InvalidCartError() from exc
        raise InvalidRequestError() from exc


async def process_checkout(body: Any, gateway: GhostsPayClient) -> CheckoutResponse:
    """
    Received -> Validated -> PricingComputed -> GatewayCalled -> ResponseShaped.
    Each call is a single attempt; nothing is retried or resumed.
    """
    try:
        req = validate_checkout(body)
        if settings.ENFORCE_CATALOG_PRICES:
            req = req.model_copy(update={"cart": reprice_cart(req.cart)})

        pricing = compute_totals(req.cart, req.bump_added)
        logger.info(
            "Checkout summary: items=%d subtotal=%s shipping=%s bump=%s total=%s cents=%s",
            len(req.cart), pricing.subtotal, pricing.shipping_cost,
            pricing.bump_cost, pricing.total, pricing.amount_in_cents,
        )

        result = await gateway.create_pix_transaction(req, pricing)
        if not result.ok:
            logger.error(
                "Gateway rejected transaction: status=%s response=%s",
                result.status_code, result.data,
            )
        result.raise_for_error()

        return CheckoutResponse(
            payment=result.data,
            pix=result.pix,
            status=str(result.status),
        )
    except StorefrontError as exc:
        if isinstance(exc, InvalidRequestError):
            logger.warning("Checkout rejected: %s", exc.message)
        else:
            logger.error("Checkout failed: %s (%s)", exc.message, exc.__class__.__name__)
        raise
    except Exception as exc:
        logger.exception("Unexpected error in checkout")
        raise UnexpectedError() from exc
