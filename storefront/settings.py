import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "4000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

GHOSTS_SECRET_KEY = os.environ.get("GHOSTS_SECRET_KEY")
GHOSTS_COMPANY_ID = os.environ.get("GHOSTS_COMPANY_ID")
GHOSTS_POSTBACK_URL = os.environ.get(
    "GHOSTS_POSTBACK_URL", "http://localhost:4000/api/ghostspay/webhook"
)
GHOSTS_BASE_URL = os.environ.get(
    "GHOSTS_BASE_URL", "https://api.ghostspaysv2.com/functions/v1"
)
GHOSTS_WEBHOOK_SECRET = os.environ.get("GHOSTS_WEBHOOK_SECRET")

STORE_DESCRIPTION = os.environ.get("STORE_DESCRIPTION", "Compra na Pink Store")
ORDER_SOURCE = os.environ.get("ORDER_SOURCE", "pink-store-frontend")
ENFORCE_CATALOG_PRICES = _flag("ENFORCE_CATALOG_PRICES")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
