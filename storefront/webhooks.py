"""Inbound GhostsPay notifications: identification, verification and merge."""

import hashlib
import hmac
import logging
from typing import Any, Optional

from .errors import InvalidSignatureError, MalformedWebhookError, NotFoundError
from .store import PaymentSnapshot, PaymentStore

logger = logging.getLogger(__name__)

# The gateway does not pin down which key carries the transaction id.
TRANSACTION_ID_KEYS = ("id", "transactionId", "referenceId")
SIGNATURE_HEADER = "X-Webhook-Signature"


def extract_transaction_id(event: Any) -> str:
    if isinstance(event, dict):
        for key in TRANSACTION_ID_KEYS:
            value = event.get(key)
            if value is not None and str(value).strip():
                return str(value).strip()
    raise MalformedWebhookError()


def sign(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: Optional[str], secret: Optional[str]) -> None:
    """No-op unless a webhook secret is configured."""
    if not secret:
        return
    if not signature:
        raise InvalidSignatureError("Missing webhook signature")
    received = signature.strip()
    if received.startswith("sha256="):
        received = received[len("sha256="):]
    expected = sign(raw_body, secret).encode("ascii")
    if not hmac.compare_digest(expected, received.encode("utf-8", "replace")):
        raise InvalidSignatureError()


def record_event(store: PaymentStore, event: Any) -> PaymentSnapshot:
    """
    Upsert a webhook into the store.
    Fields the event omits (or sends empty) keep their stored value.
    """
    transaction_id = extract_transaction_id(event)
    status = event.get("status")
    snapshot = store.merge(
        transaction_id,
        status=str(status) if status else None,
        amount=event.get("amount"),
        gateway_response=event,
    )
    logger.info(
        "Webhook recorded: id=%s status=%s amount=%s",
        transaction_id, snapshot.status, snapshot.amount,
    )
    return snapshot


def get_status(store: PaymentStore, transaction_id: str) -> PaymentSnapshot:
    snapshot = store.get(transaction_id)
    if snapshot is None:
        raise NotFoundError()
    return snapshot
