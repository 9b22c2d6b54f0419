"""GhostsPay client: builds the PIX transaction payload and calls the gateway."""

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from . import settings
from .errors import ConfigurationError, GatewayError, GatewayUnavailableError
from .models import CheckoutRequest, PixInfo, PricingResult
from .pricing import compute_totals, to_cents

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_NAME = "Cliente"
DEFAULT_CUSTOMER_EMAIL = "cliente@email.com"

# Lookup order for PIX fields in a successful response; first non-empty wins.
PIX_FIELD_PATHS = {
    "qrcode": (("pix", "qrcode"), ("gatewayResponse", "pix", "qrcode")),
    "expirationDate": (("pix", "expirationDate"), ("gatewayResponse", "pix", "expirationDate")),
    "amount": (("amount",), ("gatewayResponse", "amount")),
}


def basic_auth_token(secret_key: str, company_id: str) -> str:
    raw = f"{secret_key}:{company_id}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def parse_body(text: str) -> dict:
    """Gateway errors may come back as plain text; keep them under ``raw``."""
    try:
        data = json.loads(text)
    except ValueError:
        logger.error("Gateway returned a non-JSON body: %r", text[:500])
        return {"raw": text}
    if not isinstance(data, dict):
        return {"raw": text}
    return data


def _dig(data: Any, path: tuple) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _blank(value: Any) -> bool:
    return value is None or value == ""


def first_present(data: dict, paths, blank=_blank) -> Any:
    for path in paths:
        value = _dig(data, path)
        if not blank(value):
            return value
    return None


def extract_pix(data: dict, fallback_amount: Optional[int] = None) -> PixInfo:
    # a zero amount means the gateway did not price the charge
    amount = first_present(
        data, PIX_FIELD_PATHS["amount"], blank=lambda v: _blank(v) or v == 0
    )
    return PixInfo(
        qrcode=first_present(data, PIX_FIELD_PATHS["qrcode"]),
        expiration_date=first_present(data, PIX_FIELD_PATHS["expirationDate"]),
        amount=amount if amount is not None else fallback_amount,
    )


def build_payload(
    req: CheckoutRequest,
    pricing: PricingResult,
    *,
    postback_url: Optional[str],
    company_id: Optional[str],
    description: Optional[str] = None,
    source: Optional[str] = None,
) -> dict:
    payload = {
        "amount": pricing.amount_in_cents,
        "description": description or settings.STORE_DESCRIPTION,
        "paymentMethod": req.payment_method,
        "installments": 1,
        "postbackUrl": postback_url,
        "companyId": company_id,
        "customer": {
            "name": req.customer.name or DEFAULT_CUSTOMER_NAME,
            "email": req.customer.email or DEFAULT_CUSTOMER_EMAIL,
        },
        "items": [
            {
                "title": item.name,
                "unitPrice": to_cents(item.price),
                "quantity": item.qty,
                "externalRef": item.external_ref,
            }
            for item in req.cart
        ],
        "metadata": {
            "bumpAdded": req.bump_added,
            "source": source or settings.ORDER_SOURCE,
        },
    }

    if req.shipping is not None:
        ship = req.shipping
        payload["shipping"] = {
            "zipCode": ship.zip_code,
            "street": ship.street,
            "neighborhood": ship.neighborhood or "",
            "city": ship.city,
            "state": ship.state or "",
            "number": ship.number,
            "complement": ship.complement or "",
        }

    return payload


@dataclass
class GatewayResult:
    ok: bool
    status_code: int
    data: dict = field(default_factory=dict)
    amount_in_cents: Optional[int] = None

    @property
    def transaction_id(self) -> Optional[str]:
        tid = self.data.get("id")
        return str(tid) if tid is not None else None

    @property
    def status(self) -> str:
        return self.data.get("status") or "pending"

    @property
    def pix(self) -> PixInfo:
        return extract_pix(self.data, self.amount_in_cents)

    def error_message(self) -> str:
        return (
            self.data.get("message")
            or self.data.get("error")
            or self.data.get("raw")
            or GatewayError.default_message
        )

    def raise_for_error(self) -> None:
        if not self.ok:
            raise GatewayError(
                gateway_status=self.status_code,
                gateway_response=self.data,
                message=str(self.error_message()),
            )


class GhostsPayClient:
    def __init__(
        self,
        secret_key: Optional[str],
        company_id: Optional[str],
        base_url: Optional[str] = None,
        postback_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key
        self.company_id = company_id
        self.base_url = (base_url or settings.GHOSTS_BASE_URL).rstrip("/")
        self.postback_url = postback_url or settings.GHOSTS_POSTBACK_URL
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "GhostsPayClient":
        return cls(
            secret_key=settings.GHOSTS_SECRET_KEY,
            company_id=settings.GHOSTS_COMPANY_ID,
            base_url=settings.GHOSTS_BASE_URL,
            postback_url=settings.GHOSTS_POSTBACK_URL,
        )

    @property
    def configured(self) -> bool:
        return bool(self.secret_key) and bool(self.company_id)

    def auth_headers(self) -> dict:
        if not self.configured:
            raise ConfigurationError()
        return {
            "Authorization": f"Basic {basic_auth_token(self.secret_key, self.company_id)}",
            "Content-Type": "application/json",
        }

    async def create_pix_transaction(
        self, req: CheckoutRequest, pricing: Optional[PricingResult] = None
    ) -> GatewayResult:
        # credentials are checked before anything touches the network
        headers = self.auth_headers()
        if pricing is None:
            pricing = compute_totals(req.cart, req.bump_added)

        payload = build_payload(
            req,
            pricing,
            postback_url=self.postback_url,
            company_id=self.company_id,
        )
        logger.info(
            "Creating PIX transaction: amount=%s items=%d bump=%s",
            payload["amount"], len(payload["items"]), req.bump_added,
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                r = await client.post(
                    f"{self.base_url}/transactions",
                    json=payload,
                    headers=headers,
                )
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            logger.error("Gateway unreachable: %s", exc.__class__.__name__)
            raise GatewayUnavailableError() from exc

        data = parse_body(r.text)
        logger.info("Gateway answered status=%s id=%s", r.status_code, data.get("id"))

        return GatewayResult(
            ok=r.is_success,
            status_code=r.status_code,
            data=data,
            amount_in_cents=pricing.amount_in_cents,
        )
