"""Application settings read from the environment.

Protean infrastructure (databases, brokers, event store) is configured in
``domain.toml`` and selected with ``PROTEAN_ENV``. Everything here covers the
integrations and business knobs that live outside Protean.
"""

import os


def _int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


def environment() -> str:
    return os.environ.get("PROTEAN_ENV", "development")


def is_production() -> bool:
    return environment() == "production"


# PayOS (VietQR)
PAYOS_BASE_URL = os.environ.get("PAYOS_BASE_URL", "https://api-merchant.payos.vn")
PAYOS_CLIENT_ID = os.environ.get("PAYOS_CLIENT_ID", "")
PAYOS_API_KEY = os.environ.get("PAYOS_API_KEY", "")
PAYOS_CHECKSUM_KEY = os.environ.get("PAYOS_CHECKSUM_KEY", "")
PAYOS_RETURN_URL = os.environ.get("PAYOS_RETURN_URL", "http://localhost:3000/payment/success")
PAYOS_CANCEL_URL = os.environ.get("PAYOS_CANCEL_URL", "http://localhost:3000/payment/cancel")
PAYOS_TIMEOUT_SECONDS = _int("PAYOS_TIMEOUT_SECONDS", 15)

# SMTP
SMTP_HOST = os.environ.get("SMTP_HOST", "")
SMTP_PORT = _int("SMTP_PORT", 587)
SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
SMTP_FROM = os.environ.get("SMTP_FROM", "no-reply@storefront.local")

# Uploads
UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "uploads")
UPLOAD_BASE_URL = os.environ.get("UPLOAD_BASE_URL", "/uploads")
UPLOAD_MAX_BYTES = _int("UPLOAD_MAX_BYTES", 5 * 1024 * 1024)

# Business rules
POINTS_EARN_UNIT = _float("POINTS_EARN_UNIT", 1000.0)
# Flat fee charged when no shipping provider rate covers an order
DEFAULT_SHIPPING_FEE = _float("DEFAULT_SHIPPING_FEE", 0.0)
CURRENCY = os.environ.get("CURRENCY", "VND")

# HTTP
CORS_ORIGINS = [origin.strip() for origin in os.environ.get("CORS_ORIGINS", "*").split(",") if origin.strip()]
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
