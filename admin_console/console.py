"""
AdminConsole: one object per signed-in admin, tying the session, the API
client, the state tree and the managers together.
"""
import logging
from typing import Optional

import httpx

from .api_client import ApiClient
from .config import API_URL, REQUEST_TIMEOUT
from .errors import ApiError, ValidationError
from .fetchers import (
    fetch_brands,
    fetch_categories,
    fetch_dashboard,
    fetch_featured_candidates,
    fetch_featured_products,
    fetch_orders,
    fetch_store_settings,
    settle,
)
from .forms import BrandForm, CategoryForm, FeaturedSelection, ProductForm, StoreSettingsForm
from .inventory import InventoryReconciler
from .schemas import ORDER_STATUSES, LoginResult, Order
from .search import ProductListController
from .session import Session
from .state import AdminState

logger = logging.getLogger(__name__)


class AdminConsole:
    def __init__(
        self,
        session: Optional[Session] = None,
        base_url: str = API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session if session is not None else Session()
        self.client = ApiClient(self.session, base_url=base_url, timeout=timeout, transport=transport)
        self.state = AdminState()

        self.product_list = ProductListController(self.client, self.state)
        self.inventory = InventoryReconciler(self.client, self.state, on_commit=self.refresh_stock_views)
        self.product_form = ProductForm(self.client, self.state, on_saved=self.product_list.reload)
        self.brand_form = BrandForm(self.client, self.state, on_saved=self.refresh_brands)
        self.category_form = CategoryForm(self.client, self.state, on_saved=self.refresh_categories)
        self.settings_form = StoreSettingsForm(self.client, self.state)
        self.featured = FeaturedSelection(self.client, self.state)

    # Session
    async def login(self, email: str, password: str) -> LoginResult:
        result = await self.client.auth.login(email, password)
        logger.info("Signed in as %s", result.user.email)
        return result

    def logout(self) -> None:
        self.inventory.close()
        self.client.auth.logout()
        self.state.clear()
        logger.info("Signed out")

    # Fetching
    async def load(self) -> None:
        """Initial load of every view."""
        await settle(
            fetch_dashboard(self.client, self.state),
            self.product_list.load_page(1),
            fetch_brands(self.client, self.state),
            fetch_orders(self.client, self.state),
            fetch_featured_products(self.client, self.state),
            fetch_featured_candidates(self.client, self.state),
            fetch_store_settings(self.client, self.state),
            fetch_categories(self.client, self.state),
        )
        self.settings_form.load()

    async def refresh(self) -> None:
        await settle(
            fetch_dashboard(self.client, self.state),
            self.product_list.reload(),
            fetch_orders(self.client, self.state),
        )

    async def refresh_stock_views(self) -> None:
        # a stock change can move a product in or out of the low-stock summary
        await settle(self.product_list.reload(), fetch_dashboard(self.client, self.state))

    async def refresh_brands(self) -> bool:
        return await fetch_brands(self.client, self.state)

    async def refresh_categories(self) -> bool:
        return await fetch_categories(self.client, self.state)

    # Products
    async def delete_product(self, product_id: str) -> None:
        try:
            await self.client.products.delete(product_id)
        except ApiError as e:
            logger.error("Error deleting product %s: %s", product_id, e.message)
            self.state.notify(e.message or "Failed to delete product")
            return
        await self.product_list.reload()

    async def manage_stock(self, product_id: str):
        """The "update stock" action on a low-stock summary row."""
        return await self.inventory.open_by_id(product_id)

    # Brands
    async def delete_brand(self, brand_id: str) -> None:
        try:
            await self.client.brands.delete(brand_id)
        except ApiError as e:
            logger.error("Error deleting brand %s: %s", brand_id, e.message)
            self.state.notify(e.message or "Error deleting brand")
            return
        await self.refresh_brands()

    # Categories
    async def delete_category(self, category_id: str) -> None:
        try:
            await self.client.categories.delete(category_id)
        except ApiError as e:
            logger.error("Error deleting category %s: %s", category_id, e.message)
            self.state.notify(e.message or "Failed to delete category")
            return
        remaining = [c for c in self.state.categories.value if c.id != category_id]
        self.state.categories.set(remaining)
        self.state.notify("Category deleted successfully", level="success")

    # Orders
    def view_order(self, order_id: str) -> Optional[Order]:
        self.state.selected_order = self.state.find_order(order_id)
        return self.state.selected_order

    def close_order(self) -> None:
        self.state.selected_order = None

    async def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        if status not in ORDER_STATUSES:
            raise ValidationError(errors={"status": f"Unknown order status: {status}"})
        try:
            order = await self.client.orders.update_status(order_id, status)
        except ApiError as e:
            logger.error("Error updating order %s status: %s", order_id, e.message)
            self.state.notify(e.message or "Failed to update order status")
            return None
        await settle(fetch_orders(self.client, self.state), fetch_dashboard(self.client, self.state))
        if self.state.selected_order is not None and self.state.selected_order.id == order_id:
            self.state.selected_order = self.state.find_order(order_id) or order
        return order

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AdminConsole":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
