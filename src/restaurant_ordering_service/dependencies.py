"""Shared dependency factory.

Builds repositories, services and adapters from environment variables. Used
by the API entry point (``main.py``) and the standalone bestseller script so
both read the same data directory with the same settings.
"""

import logging
import os
from pathlib import Path

from restaurant_ordering_service.adapters.base_adapter import PaymentGateway
from restaurant_ordering_service.adapters.paymongo_adapter import DEFAULT_BASE_URL, PayMongoAdapter
from restaurant_ordering_service.repositories.bestseller_repository import BestsellerRepository
from restaurant_ordering_service.repositories.menu_repository import MenuRepository
from restaurant_ordering_service.repositories.order_repository import OrderRepository
from restaurant_ordering_service.services.bestseller_service import (
    DEFAULT_BESTSELLER_LIMIT,
    DEFAULT_EXCLUDED_CATEGORY,
    BestsellerService,
)

logger = logging.getLogger(__name__)


def get_data_dir(data_dir: str | Path | None = None) -> Path:
    """Resolve and create the directory holding the JSON data files.

    Args:
        data_dir: Explicit directory; falls back to DATA_DIR, then ./data

    Returns:
        Absolute path of the data directory
    """
    path = Path(data_dir or os.getenv("DATA_DIR", "data")).resolve()
    path.mkdir(parents=True, exist_ok=True)
    logger.info(f"Using data directory {path}")
    return path


def create_bestseller_service(data_dir: Path) -> BestsellerService:
    """Create the bestseller service together with the repositories it reads.

    Returns:
        BestsellerService whose repositories can be shared with other services
    """
    excluded_category = os.getenv("BESTSELLER_EXCLUDED_CATEGORY", DEFAULT_EXCLUDED_CATEGORY)
    return BestsellerService(
        menu_repository=MenuRepository(data_dir),
        order_repository=OrderRepository(data_dir),
        bestseller_repository=BestsellerRepository(data_dir),
        limit=int(os.getenv("BESTSELLER_LIMIT", str(DEFAULT_BESTSELLER_LIMIT))),
        excluded_category=excluded_category or None,
    )


def create_payment_gateway() -> PaymentGateway | None:
    """Create the payment gateway adapter from environment variables.

    Returns:
        Configured adapter, or None when no secret key is set
    """
    secret_key = os.getenv("PAYMONGO_SECRET_KEY")
    if not secret_key:
        logger.warning("PAYMONGO_SECRET_KEY not configured, online payments disabled")
        return None

    logger.info("PayMongo payment gateway configured")
    return PayMongoAdapter(
        secret_key=secret_key,
        public_key=os.getenv("PAYMONGO_PUBLIC_KEY"),
        base_url=os.getenv("PAYMONGO_BASE_URL", DEFAULT_BASE_URL),
    )


def get_staff_api_keys() -> list[str]:
    """Read the comma-separated STAFF_API_KEYS variable.

    Returns:
        Accepted staff keys; a development key when none are configured
    """
    api_keys_str = os.getenv("STAFF_API_KEYS", "")
    api_keys = [key.strip() for key in api_keys_str.split(",") if key.strip()]

    if not api_keys:
        logger.warning("No STAFF_API_KEYS configured - using development staff key")
        api_keys = ["dev-staff-key"]

    return api_keys


def get_cors_origins() -> list[str]:
    """Read the comma-separated CORS_ORIGINS variable."""
    return [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()]
