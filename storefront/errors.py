"""Error taxonomy shared by the checkout, gateway and webhook layers.

Every error knows the HTTP status it maps to and renders itself as the
``{"ok": false, "error": ...}`` body the storefront client expects.
"""

from typing import Any, Optional


class StorefrontError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"ok": False, "error": self.message, **self.details}


class InvalidRequestError(StorefrontError):
    status_code = 400
    default_message = "Invalid request body"


class InvalidCartError(InvalidRequestError):
    default_message = "Cart is empty or invalid"


class ConfigurationError(StorefrontError):
    status_code = 500
    default_message = "Payment gateway credentials are not configured on the server"


class GatewayError(StorefrontError):
    """Upstream answered with a non-success status; status and body pass through."""

    default_message = "Failed to create payment on the gateway"

    def __init__(self, gateway_status: int, gateway_response: dict, message: Optional[str] = None):
        self.status_code = gateway_status
        self.gateway_status = gateway_status
        self.gateway_response = gateway_response
        super().__init__(
            message,
            gatewayStatus=gateway_status,
            gatewayResponse=gateway_response,
        )


class GatewayUnavailableError(StorefrontError):
    status_code = 503
    default_message = "Payment gateway unavailable; try again"


class MalformedWebhookError(StorefrontError):
    status_code = 400
    default_message = "Webhook without transaction id"


class InvalidSignatureError(StorefrontError):
    status_code = 401
    default_message = "Invalid webhook signature"


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = "Payment not found"


class UnexpectedError(StorefrontError):
    status_code = 500
