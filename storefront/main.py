import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import settings
from .catalog import list_products
from .checkout import process_checkout
from .errors import MalformedWebhookError, StorefrontError, UnexpectedError
from .gateway import GhostsPayClient
from .models import CheckoutResponse, PaymentStatusResponse, Product
from .store import InMemoryPaymentStore, PaymentStore
from .webhooks import SIGNATURE_HEADER, get_status, record_event, verify_signature

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=settings.LOG_LEVEL,
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

payment_store = InMemoryPaymentStore()


def get_store() -> PaymentStore:
    return payment_store


def get_gateway() -> GhostsPayClient:
    return GhostsPayClient.from_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.GHOSTS_SECRET_KEY or not settings.GHOSTS_COMPANY_ID:
        logger.warning("GHOSTS_SECRET_KEY or GHOSTS_COMPANY_ID not configured; checkout will fail")
    else:
        logger.info("GhostsPay credentials loaded")
    if not settings.GHOSTS_WEBHOOK_SECRET:
        logger.warning("GHOSTS_WEBHOOK_SECRET not set; webhook signatures are not verified")
    yield


app = FastAPI(title="Pink Store Payments", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    error = UnexpectedError()
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.get("/api/health")
def health():
    return {"ok": True, "message": "Payments backend online"}


@app.get("/api/products", response_model=list[Product])
def products():
    return list_products()


@app.post("/api/checkout", response_model=CheckoutResponse)
async def checkout(
    body: Any = Body(default=None),
    gateway: GhostsPayClient = Depends(get_gateway),
):
    return await process_checkout(body, gateway)


@app.post("/api/ghostspay/webhook")
async def ghostspay_webhook(request: Request, store: PaymentStore = Depends(get_store)):
    """
    Gateway postback. Any caller reaching this URL can push a status unless
    GHOSTS_WEBHOOK_SECRET is configured.
    """
    raw = await request.body()

    try:
        verify_signature(raw, request.headers.get(SIGNATURE_HEADER), settings.GHOSTS_WEBHOOK_SECRET)
        try:
            event = json.loads(raw) if raw else None
        except ValueError as exc:
            raise MalformedWebhookError("Invalid webhook JSON") from exc
        record_event(store, event)
    except StorefrontError as exc:
        logger.warning("Webhook rejected: %s", exc.message)
        raise
    except Exception as exc:
        logger.exception("Unexpected error processing webhook")
        raise UnexpectedError() from exc

    return {"ok": True}


@app.get("/api/payment-status/{transaction_id}", response_model=PaymentStatusResponse)
def payment_status(transaction_id: str, store: PaymentStore = Depends(get_store)):
    snapshot = get_status(store, transaction_id)
    return PaymentStatusResponse(
        id=transaction_id,
        status=snapshot.status,
        amount=snapshot.amount,
        gateway_response=snapshot.gateway_response,
    )


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level="info")


if __name__ == "__main__":
    run()
