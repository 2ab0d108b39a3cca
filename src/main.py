"""Entry point for the restaurant ordering API.

Builds the app from environment variables (see ``dependencies``). Run it with
``uvicorn main:app`` from ``src/`` or execute this file directly.
"""

import logging
import os

from fastapi import FastAPI

from restaurant_ordering_service.dependencies import (
    create_bestseller_service,
    create_payment_gateway,
    get_cors_origins,
    get_data_dir,
    get_staff_api_keys,
)
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.handlers.file_watch_handler import CompletedOrdersWatcher
from restaurant_ordering_service.observability import configure_logging, setup_observability
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Initializes repositories on the data directory
    3. Creates services
    4. Configures the payment gateway and optional file watcher
    5. Creates the FastAPI app
    6. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing restaurant ordering service...")

    data_dir = get_data_dir()

    # Repositories are shared so every service uses the same file locks
    bestseller_service = create_bestseller_service(data_dir)
    menu_service = MenuService(menu_repository=bestseller_service.menu_repository)
    order_service = OrderService(
        order_repository=bestseller_service.order_repository,
        bestseller_service=bestseller_service,
    )

    logger.info("Services initialized")

    watcher = None
    if os.getenv("WATCH_COMPLETED_ORDERS", "false").lower() == "true":
        watcher = CompletedOrdersWatcher(
            path=bestseller_service.order_repository.completed_orders_path,
            bestseller_service=bestseller_service,
            debounce_seconds=float(os.getenv("WATCH_DEBOUNCE_SECONDS", "1.0")),
            store=bestseller_service.order_repository.completed_orders_store,
        )
        logger.info("Completed orders file watcher enabled")

    app = create_app(
        menu_service=menu_service,
        order_service=order_service,
        bestseller_service=bestseller_service,
        api_keys=get_staff_api_keys(),
        payment_gateway=create_payment_gateway(),
        cors_origins=get_cors_origins(),
        completed_orders_watcher=watcher,
    )

    setup_observability(app)

    logger.info("Restaurant ordering service initialized successfully")
    return app


# Test runs import this module without touching the data directory
app = create_application() if os.getenv("ENVIRONMENT") != "test" else FastAPI()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
