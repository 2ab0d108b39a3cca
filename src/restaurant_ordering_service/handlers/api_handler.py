"""FastAPI application for the ordering API.

Customer-facing endpoints (menu, checkout, payment) are public. Back-office
endpoints (order queue, menu management, bestseller refresh, sales) require a
staff key in the X-API-Key header.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from restaurant_ordering_service.adapters.base_adapter import PaymentGateway
from restaurant_ordering_service.auth.api_dependencies import require_staff_key
from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator
from restaurant_ordering_service.errors import OrderingServiceError, PaymentGatewayError
from restaurant_ordering_service.handlers.file_watch_handler import CompletedOrdersWatcher
from restaurant_ordering_service.models.bestseller_models import (
    BestsellerCheckResponse,
    BestsellerData,
    BestsellerUpdateResult,
)
from restaurant_ordering_service.models.menu_models import (
    Category,
    CategoryCreate,
    CategoryReorderRequest,
    CategoryUpdate,
    ItemReorderRequest,
    MenuData,
    MenuItem,
    MenuItemCreate,
    MenuItemUpdate,
    MenuReplaceRequest,
)
from restaurant_ordering_service.models.order_models import (
    Order,
    OrderActionRequest,
    OrderCollections,
    OrderCreateRequest,
    SalesSummary,
)
from restaurant_ordering_service.models.payment_models import (
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from restaurant_ordering_service.services.bestseller_service import BestsellerService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class OrderActionResponse(BaseModel):
    """Response model for order lifecycle transitions."""

    message: str
    order: Order


class DeleteResponse(BaseModel):
    """Response model for deletions."""

    success: bool
    id: str


def create_app(
    menu_service: MenuService,
    order_service: OrderService,
    bestseller_service: BestsellerService,
    api_keys: list[str],
    payment_gateway: PaymentGateway | None = None,
    cors_origins: list[str] | None = None,
    completed_orders_watcher: CompletedOrdersWatcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_service: Service for menu management
        order_service: Service for the order lifecycle
        bestseller_service: Service for bestseller ranking and tags
        api_keys: Valid staff API keys
        payment_gateway: Payment provider adapter (payments disabled if None)
        cors_origins: Origins allowed to call the API from a browser
        completed_orders_watcher: Optional watcher started with the app

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if completed_orders_watcher is not None:
            completed_orders_watcher.start()
        yield
        if completed_orders_watcher is not None:
            await completed_orders_watcher.stop()

    app = FastAPI(
        title="Restaurant Ordering API",
        description="Menu, checkout, order queue and bestseller API for a restaurant",
        version="1.0.0",
        lifespan=lifespan,
    )

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "X-API-Key"],
        )

    # Store services in app state for access in route handlers
    app.state.menu_service = menu_service
    app.state.order_service = order_service
    app.state.bestseller_service = bestseller_service
    app.state.payment_gateway = payment_gateway
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    @app.exception_handler(OrderingServiceError)
    async def handle_service_error(_request: Request, exc: OrderingServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
            for error in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"detail": "; ".join(problems)})

    def staff_only(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate the staff key."""
        return require_staff_key(x_api_key=x_api_key, validator=app.state.api_key_validator)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Menu

    @app.get("/api/menu", response_model=MenuData, response_model_exclude_none=True, tags=["Menu"])
    async def get_menu() -> MenuData:
        """Get all menu items and categories."""
        menu: MenuData = await app.state.menu_service.get_menu()
        return menu

    @app.post("/api/menu", response_model=MenuData, response_model_exclude_none=True, tags=["Menu"])
    async def replace_menu(
        request: MenuReplaceRequest,
        _api_key: str = Depends(staff_only),
    ) -> MenuData:
        """Replace items and/or categories wholesale."""
        menu: MenuData = await app.state.menu_service.replace_menu(
            items=request.items, categories=request.categories
        )
        return menu

    @app.post(
        "/api/menu/items",
        response_model=MenuItem,
        response_model_exclude_none=True,
        status_code=201,
        tags=["Menu"],
    )
    async def add_menu_item(
        request: MenuItemCreate,
        _api_key: str = Depends(staff_only),
    ) -> MenuItem:
        """Add a menu item at the end of its category."""
        item: MenuItem = await app.state.menu_service.add_item(request)
        return item

    @app.post("/api/menu/items/reorder", response_model=list[MenuItem], tags=["Menu"])
    async def reorder_menu_items(
        request: ItemReorderRequest,
        _api_key: str = Depends(staff_only),
    ) -> list[MenuItem]:
        """Set the display order of the items in one category."""
        items: list[MenuItem] = await app.state.menu_service.reorder_items(
            request.category, request.item_ids
        )
        return items

    @app.put("/api/menu/items/{item_id}", response_model=MenuItem, tags=["Menu"])
    async def update_menu_item(
        item_id: str,
        changes: MenuItemUpdate,
        _api_key: str = Depends(staff_only),
    ) -> MenuItem:
        """Update fields of a menu item."""
        item: MenuItem = await app.state.menu_service.update_item(item_id, changes)
        return item

    @app.delete("/api/menu/items/{item_id}", response_model=DeleteResponse, tags=["Menu"])
    async def delete_menu_item(
        item_id: str,
        _api_key: str = Depends(staff_only),
    ) -> DeleteResponse:
        """Delete a menu item."""
        await app.state.menu_service.delete_item(item_id)
        return DeleteResponse(success=True, id=item_id)

    @app.post("/api/menu/categories", response_model=Category, status_code=201, tags=["Menu"])
    async def add_category(
        request: CategoryCreate,
        _api_key: str = Depends(staff_only),
    ) -> Category:
        """Add a category after the existing ones."""
        category: Category = await app.state.menu_service.add_category(request)
        return category

    @app.post("/api/menu/categories/reorder", response_model=list[Category], tags=["Menu"])
    async def reorder_categories(
        request: CategoryReorderRequest,
        _api_key: str = Depends(staff_only),
    ) -> list[Category]:
        """Set the display order of categories."""
        categories: list[Category] = await app.state.menu_service.reorder_categories(
            request.category_ids
        )
        return categories

    @app.put("/api/menu/categories/{category_id}", response_model=Category, tags=["Menu"])
    async def update_category(
        category_id: str,
        changes: CategoryUpdate,
        _api_key: str = Depends(staff_only),
    ) -> Category:
        """Rename or move a category; a rename updates every item in it."""
        category: Category = await app.state.menu_service.update_category(category_id, changes)
        return category

    @app.delete("/api/menu/categories/{category_id}", response_model=DeleteResponse, tags=["Menu"])
    async def delete_category(
        category_id: str,
        _api_key: str = Depends(staff_only),
    ) -> DeleteResponse:
        """Delete a category that no longer has items."""
        await app.state.menu_service.delete_category(category_id)
        return DeleteResponse(success=True, id=category_id)

    # Orders

    @app.post(
        "/api/orders",
        response_model=Order,
        response_model_exclude_none=True,
        status_code=201,
        tags=["Orders"],
    )
    async def create_order(request: OrderCreateRequest) -> Order:
        """Place a new order from checkout."""
        order: Order = await app.state.order_service.create_order(request)
        return order

    @app.get(
        "/api/orders",
        response_model=OrderCollections,
        response_model_exclude_none=True,
        tags=["Orders"],
    )
    async def list_orders(_api_key: str = Depends(staff_only)) -> OrderCollections:
        """Get open, paid and completed orders."""
        orders: OrderCollections = await app.state.order_service.list_orders()
        return orders

    @app.get("/api/orders/sales", response_model=SalesSummary, tags=["Orders"])
    async def get_sales_summary(_api_key: str = Depends(staff_only)) -> SalesSummary:
        """Get sales totals over completed orders."""
        summary: SalesSummary = await app.state.order_service.get_sales_summary()
        return summary

    @app.post(
        "/api/orders/mark-paid",
        response_model=OrderActionResponse,
        response_model_exclude_none=True,
        tags=["Orders"],
    )
    async def mark_order_paid(
        request: OrderActionRequest,
        _api_key: str = Depends(staff_only),
    ) -> OrderActionResponse:
        """Move an open order to paid."""
        order = await app.state.order_service.mark_paid(request.order_id)
        return OrderActionResponse(message="Order marked as paid", order=order)

    @app.post(
        "/api/orders/mark-unpaid",
        response_model=OrderActionResponse,
        response_model_exclude_none=True,
        tags=["Orders"],
    )
    async def mark_order_unpaid(
        request: OrderActionRequest,
        _api_key: str = Depends(staff_only),
    ) -> OrderActionResponse:
        """Move a paid order back to open."""
        order = await app.state.order_service.mark_unpaid(request.order_id)
        return OrderActionResponse(message="Order marked as unpaid", order=order)

    @app.post(
        "/api/orders/complete",
        response_model=OrderActionResponse,
        response_model_exclude_none=True,
        tags=["Orders"],
    )
    async def complete_order(
        request: OrderActionRequest,
        _api_key: str = Depends(staff_only),
    ) -> OrderActionResponse:
        """Move a paid order to completed and refresh bestsellers."""
        order = await app.state.order_service.complete_order(request.order_id)
        return OrderActionResponse(message="Order completed successfully", order=order)

    @app.delete(
        "/api/orders/cancel",
        response_model=OrderActionResponse,
        response_model_exclude_none=True,
        tags=["Orders"],
    )
    async def cancel_order(
        request: OrderActionRequest,
        _api_key: str = Depends(staff_only),
    ) -> OrderActionResponse:
        """Permanently remove an open order."""
        order = await app.state.order_service.cancel_order(request.order_id)
        return OrderActionResponse(message="Order cancelled successfully", order=order)

    @app.api_route(
        "/api/orders/delete-completed",
        methods=["DELETE", "POST"],
        response_model=OrderActionResponse,
        response_model_exclude_none=True,
        tags=["Orders"],
    )
    async def delete_completed_order(
        request: OrderActionRequest,
        _api_key: str = Depends(staff_only),
    ) -> OrderActionResponse:
        """Purge a completed order and refresh bestsellers."""
        order = await app.state.order_service.delete_completed_order(request.order_id)
        return OrderActionResponse(message="Order deleted successfully", order=order)

    # Bestsellers

    @app.get("/api/bestseller", response_model=BestsellerData, tags=["Bestsellers"])
    async def get_bestsellers() -> BestsellerData:
        """Get the stored bestseller ranking."""
        ranking: BestsellerData = await app.state.bestseller_service.get_bestsellers()
        return ranking

    @app.post("/api/bestseller", response_model=BestsellerData, tags=["Bestsellers"])
    async def save_bestsellers(
        ranking: BestsellerData,
        _api_key: str = Depends(staff_only),
    ) -> BestsellerData:
        """Overwrite the stored ranking."""
        saved: BestsellerData = await app.state.bestseller_service.save_bestsellers(ranking)
        return saved

    @app.post("/api/bestseller/update", response_model=BestsellerUpdateResult, tags=["Bestsellers"])
    async def force_bestseller_update(
        _api_key: str = Depends(staff_only),
    ) -> BestsellerUpdateResult:
        """Recompute the ranking and menu tags from completed orders."""
        logger.info("Manual bestseller update triggered")
        result: BestsellerUpdateResult = await asyncio.to_thread(
            app.state.bestseller_service.recompute, trigger="manual"
        )
        return result

    @app.get(
        "/api/bestseller/check/{item_id}",
        response_model=BestsellerCheckResponse,
        tags=["Bestsellers"],
    )
    async def check_bestseller(item_id: str) -> BestsellerCheckResponse:
        """Check whether an item is currently a bestseller."""
        is_bestseller: bool = await app.state.bestseller_service.is_bestseller(item_id)
        return BestsellerCheckResponse(item_id=item_id, is_bestseller=is_bestseller)

    # Payments

    @app.post("/api/payments/intent", response_model=PaymentIntentResponse, tags=["Payments"])
    async def create_payment_intent(request: PaymentIntentRequest) -> PaymentIntentResponse:
        """Create a payment intent with the payment provider.

        Raises:
            HTTPException: 503 if no payment provider is configured
        """
        gateway: PaymentGateway | None = app.state.payment_gateway
        if gateway is None:
            raise HTTPException(status_code=503, detail="Payment gateway is not configured")

        result = await gateway.create_payment_intent(
            amount=request.amount,
            currency=request.currency,
            description=request.description,
            payment_method=request.payment_method,
        )
        if not result.success:
            raise PaymentGatewayError(result.error_message or "Payment processing failed")

        return PaymentIntentResponse(
            payment_intent=result.payment_intent,
            client_key=result.client_key,
            public_key=gateway.public_key,
        )

    return app
