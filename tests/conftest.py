import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from storefront.gateway import GhostsPayClient
from storefront.main import app, get_gateway, get_store
from storefront.store import InMemoryPaymentStore

SECRET_KEY = "sk_test_123"
COMPANY_ID = "company_42"
BASE_URL = "https://gateway.test/functions/v1"
POSTBACK_URL = "https://shop.test/api/ghostspay/webhook"


class GatewayStub:
    """Stands in for GhostsPay: records requests, answers with a canned response."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.text = None
        self.body = {
            "id": "tx_abc123",
            "status": "waiting_payment",
            "amount": 10190,
            "pix": {
                "qrcode": "00020126580014br.gov.bcb.pix0136tx_abc123",
                "expirationDate": "2026-10-20T12:00:00Z",
            },
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def gateway_stub():
    return GatewayStub()


@pytest.fixture
def gateway_client(gateway_stub):
    return GhostsPayClient(
        secret_key=SECRET_KEY,
        company_id=COMPANY_ID,
        base_url=BASE_URL,
        postback_url=POSTBACK_URL,
        transport=httpx.MockTransport(gateway_stub),
    )


@pytest.fixture
def store():
    return InMemoryPaymentStore()


@pytest.fixture
def checkout_body():
    return {
        "cart": [
            {"id": "prod_01", "productId": "prod_01", "name": "VF Desodorante Colônia 75 ml", "price": 87.00, "qty": 1},
        ],
        "customer": {"name": "Maria Silva", "email": "maria@example.com"},
        "paymentMethod": "PIX",
        "bumpAdded": False,
    }


@pytest_asyncio.fixture
async def client(store, gateway_client):
    """httpx AsyncClient over the ASGI app with store and gateway overridden."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_gateway] = lambda: gateway_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
