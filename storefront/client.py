"""
Client-side checkout flow against the storefront API.

Mirrors what the web storefront does in the browser: keeps the cart,
previews totals with the same pricing rules as the server and walks the
payment status through idle -> processing -> pix | success | error.
"""

import enum
import logging
from decimal import Decimal
from typing import Any, Optional

import httpx

from .models import CartItem, PixInfo, Product
from .pricing import cart_subtotal, compute_totals, free_shipping_progress

logger = logging.getLogger(__name__)

LEAVE_PIX_WARNING = (
    "Se você sair dessa tela agora, o pagamento por PIX poderá não ser "
    "concluído e seu pedido poderá ser cancelado."
)


class PaymentStatus(str, enum.Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    PIX = "pix"
    SUCCESS = "success"
    ERROR = "error"


class InvalidTransition(Exception):
    pass


class CheckoutSession:
    def __init__(self, base_url: str = "http://localhost:4000", http: Optional[httpx.Client] = None):
        self._http = http or httpx.Client(base_url=base_url)
        self.cart: list[CartItem] = []
        self.status = PaymentStatus.IDLE
        self.pix_info: Optional[PixInfo] = None
        self.transaction_id: Optional[str] = None
        self.error: Optional[str] = None
        self.exit_dialog_open = False

    # -- cart ---------------------------------------------------------------

    def add_to_cart(self, product: Product, qty: int = 1) -> None:
        for index, item in enumerate(self.cart):
            if item.id == product.id:
                self.cart[index] = item.model_copy(update={"qty": item.qty + qty})
                return
        self.cart.append(
            CartItem(
                id=product.id,
                product_id=product.id,
                name=product.name,
                price=product.price,
                image=product.image,
                qty=qty,
            )
        )

    def remove_from_cart(self, item_id) -> None:
        self.cart = [item for item in self.cart if item.id != item_id]

    def update_qty(self, item_id, qty: int) -> None:
        if qty < 1:
            return
        self.cart = [
            item.model_copy(update={"qty": qty}) if item.id == item_id else item
            for item in self.cart
        ]

    def clear(self) -> None:
        self.cart = []

    @property
    def item_count(self) -> int:
        return sum(item.qty for item in self.cart)

    def summary(self, bump_added: bool = False) -> dict:
        subtotal = cart_subtotal(self.cart)
        missing, progress = free_shipping_progress(subtotal)
        result = {
            "items": self.item_count,
            "subtotal": subtotal,
            "missing_for_free_shipping": missing,
            "free_shipping_progress": progress,
        }
        if self.cart:
            result["pricing"] = compute_totals(self.cart, bump_added)
        return result

    # -- payment flow -------------------------------------------------------

    def _payload(self, customer: dict, shipping: Optional[dict], bump_added: bool) -> dict:
        return {
            "cart": [item.model_dump(mode="json", by_alias=True) for item in self.cart],
            "customer": {"name": customer.get("name"), "email": customer.get("email")},
            "shipping": shipping,
            "paymentMethod": "PIX",
            "bumpAdded": bump_added,
        }

    def checkout(self, customer: dict, shipping: Optional[dict] = None, bump_added: bool = False) -> PaymentStatus:
        if self.status not in (PaymentStatus.IDLE, PaymentStatus.ERROR):
            raise InvalidTransition(f"cannot start checkout while {self.status.value}")

        self.status = PaymentStatus.PROCESSING
        self.error = None
        try:
            r = self._http.post("/api/checkout", json=self._payload(customer, shipping, bump_added))
            data = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Checkout request failed: %s", exc)
            return self._fail("Falha ao criar pagamento")

        if not r.is_success or not data.get("ok"):
            return self._fail(data.get("error") or "Falha ao criar pagamento")

        pix = PixInfo.model_validate(data.get("pix") or {})
        if not pix.qrcode:
            logger.error("Checkout response without PIX qrcode: %s", data)
            return self._fail("Não foi possível gerar o PIX")

        payment = data.get("payment") or {}
        self.transaction_id = str(payment["id"]) if payment.get("id") is not None else None
        self.pix_info = pix
        self.status = PaymentStatus.PIX
        self.clear()
        return self.status

    def _fail(self, message: str) -> PaymentStatus:
        self.error = message
        self.status = PaymentStatus.ERROR
        return self.status

    def copy_pix_code(self) -> str:
        if self.status is not PaymentStatus.PIX or self.pix_info is None:
            raise InvalidTransition("no PIX code to copy")
        return self.pix_info.qrcode

    def leave_warning(self) -> Optional[str]:
        """Best-effort prompt for browser navigation while a PIX is open."""
        if self.status is PaymentStatus.PIX and self.pix_info is not None:
            return LEAVE_PIX_WARNING
        return None

    def request_exit(self) -> None:
        if self.status is PaymentStatus.PIX:
            self.exit_dialog_open = True

    def dismiss_exit(self) -> None:
        self.exit_dialog_open = False

    def confirm_exit(self) -> None:
        if self.status is not PaymentStatus.PIX or not self.exit_dialog_open:
            raise InvalidTransition("exit must be requested from the PIX screen first")
        self.exit_dialog_open = False
        self.status = PaymentStatus.IDLE
        self.pix_info = None
        self.transaction_id = None

    def continue_shopping(self) -> None:
        if self.status in (PaymentStatus.SUCCESS, PaymentStatus.ERROR):
            self.status = PaymentStatus.IDLE
            self.error = None

    def fetch_payment_status(self) -> Optional[dict[str, Any]]:
        """Read the webhook-fed status; the session state is left untouched."""
        if not self.transaction_id:
            return None
        r = self._http.get(f"/api/payment-status/{self.transaction_id}")
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    def close(self) -> None:
        self._http.close()

    @property
    def pix_amount(self) -> Optional[Decimal]:
        if self.pix_info is None or self.pix_info.amount is None:
            return None
        return Decimal(str(self.pix_info.amount)) / 100
