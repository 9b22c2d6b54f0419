import json
from decimal import Decimal

import httpx
import pytest

from storefront.catalog import get_product
from storefront.client import CheckoutSession, InvalidTransition, PaymentStatus
from storefront.pricing import compute_totals

CUSTOMER = {"name": "Maria", "email": "maria@example.com"}


class FakeBackend:
    """Canned answers for the storefront API, keyed by path."""

    def __init__(self):
        self.requests = []
        self.checkout_status = 200
        self.checkout_body = {
            "ok": True,
            "payment": {"id": "tx_1", "status": "pending"},
            "pix": {"qrcode": "000201PIXCODE", "expirationDate": "2026-10-20T12:00:00Z", "amount": 10190},
            "status": "pending",
        }
        self.payments = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/checkout":
            return httpx.Response(self.checkout_status, json=self.checkout_body)
        if request.url.path.startswith("/api/payment-status/"):
            tid = request.url.path.rsplit("/", 1)[-1]
            if tid not in self.payments:
                return httpx.Response(404, json={"ok": False, "error": "Payment not found"})
            return httpx.Response(200, json={"ok": True, "id": tid, **self.payments[tid]})
        return httpx.Response(404)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session(backend):
    http = httpx.Client(transport=httpx.MockTransport(backend), base_url="http://test")
    s = CheckoutSession(http=http)
    yield s
    s.close()


class TestCart:

    def test_add_merges_same_product(self, session):
        product = get_product("prod_01")
        session.add_to_cart(product)
        session.add_to_cart(product, qty=2)
        assert len(session.cart) == 1
        assert session.cart[0].qty == 3
        assert session.item_count == 3

    def test_update_qty_ignores_below_one(self, session):
        session.add_to_cart(get_product("prod_02"), qty=2)
        session.update_qty("prod_02", 0)
        assert session.cart[0].qty == 2
        session.update_qty("prod_02", 5)
        assert session.cart[0].qty == 5

    def test_remove(self, session):
        session.add_to_cart(get_product("prod_02"))
        session.add_to_cart(get_product("prod_06"))
        session.remove_from_cart("prod_02")
        assert [i.id for i in session.cart] == ["prod_06"]

    def test_summary_matches_server_pricing(self, session):
        session.add_to_cart(get_product("prod_04"), qty=2)
        summary = session.summary(bump_added=True)
        assert summary["pricing"] == compute_totals(session.cart, True)
        # 179.80 subtotal, 20.10 missing for free shipping
        assert summary["missing_for_free_shipping"] == Decimal("20.10")

    def test_empty_summary_has_no_pricing(self, session):
        assert "pricing" not in session.summary()


class TestCheckoutFlow:

    def test_success_enters_pix(self, session, backend):
        session.add_to_cart(get_product("prod_01"))
        state = session.checkout(CUSTOMER, bump_added=True)

        assert state is PaymentStatus.PIX
        assert session.transaction_id == "tx_1"
        assert session.cart == []
        assert session.copy_pix_code() == "000201PIXCODE"
        assert session.pix_amount == Decimal("101.90")

        sent = json.loads(backend.requests[0].content)
        assert sent["bumpAdded"] is True
        assert sent["paymentMethod"] == "PIX"
        assert sent["cart"][0]["productId"] == "prod_01"

    def test_pix_requires_confirmed_exit(self, session):
        session.add_to_cart(get_product("prod_01"))
        session.checkout(CUSTOMER)

        assert session.leave_warning()
        with pytest.raises(InvalidTransition):
            session.confirm_exit()

        session.request_exit()
        session.dismiss_exit()
        assert session.status is PaymentStatus.PIX

        session.request_exit()
        session.confirm_exit()
        assert session.status is PaymentStatus.IDLE
        assert session.pix_info is None
        assert session.leave_warning() is None

    def test_cannot_checkout_twice_while_pix(self, session):
        session.add_to_cart(get_product("prod_01"))
        session.checkout(CUSTOMER)
        with pytest.raises(InvalidTransition):
            session.checkout(CUSTOMER)

    def test_server_error_enters_error(self, session, backend):
        backend.checkout_status = 502
        backend.checkout_body = {"ok": False, "error": "Bad Gateway", "gatewayStatus": 502}
        session.add_to_cart(get_product("prod_01"))

        assert session.checkout(CUSTOMER) is PaymentStatus.ERROR
        assert session.error == "Bad Gateway"
        assert len(session.cart) == 1

        session.continue_shopping()
        assert session.status is PaymentStatus.IDLE

    def test_missing_qrcode_is_an_error(self, session, backend):
        backend.checkout_body["pix"] = {"qrcode": None, "amount": 10190}
        session.add_to_cart(get_product("prod_01"))
        assert session.checkout(CUSTOMER) is PaymentStatus.ERROR

    def test_status_lookup_does_not_transition(self, session, backend):
        session.add_to_cart(get_product("prod_01"))
        session.checkout(CUSTOMER)

        assert session.fetch_payment_status() is None

        backend.payments["tx_1"] = {"status": "paid", "amount": 10190, "gatewayResponse": {}}
        assert session.fetch_payment_status()["status"] == "paid"
        assert session.status is PaymentStatus.PIX
