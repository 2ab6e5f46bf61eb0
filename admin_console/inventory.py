"""
Per-size stock management for one product at a time.

For every size the reconciler keeps two numbers: the value the backend last
confirmed and the value currently displayed. An adjustment changes the
displayed value at once and then writes it to the backend. A successful write
promotes it to confirmed; a failed write puts the confirmed value back on
display, unless a newer write for the same size is still outstanding.

Writes for one size of a product go out strictly in the order they were
issued, even across closing and reopening the product, so the backend ends up
holding the last value the admin saw.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

from .api_client import ApiClient
from .errors import ApiError, ValidationError
from .schemas import Product
from .state import AdminState

logger = logging.getLogger(__name__)


class InventoryReconciler:
    def __init__(
        self,
        client: ApiClient,
        state: AdminState,
        on_commit: Optional[Callable[[], Awaitable[object]]] = None,
    ):
        self.client = client
        self.state = state
        # refreshes views that depend on stock (low-stock summary, product list)
        self.on_commit = on_commit
        self.product: Optional[Product] = None
        self._confirmed: Dict[int, int] = {}
        self._pending: Dict[int, int] = {}
        self._latest: Dict[int, int] = {}
        self._locks: Dict[Tuple[str, int], asyncio.Lock] = {}
        self._generation = 0
        self._seq = 0

    @property
    def is_open(self) -> bool:
        return self.product is not None

    def open(self, product: Product) -> None:
        """Start managing stock for product, replacing any previous mapping."""
        self._reset()
        self.product = product
        self._confirmed = {s.size: s.stock for s in product.sizes}
        self._pending = dict(self._confirmed)
        logger.info("Managing inventory for %s (%s)", product.name, product.id)

    async def open_by_id(self, product_id: str) -> Optional[Product]:
        """
        Open stock management from a summary row.

        Fetches the full product; if that fails, falls back to the copy in the
        current product list. Returns None when neither is available.
        """
        try:
            product = await self.client.products.get(product_id)
        except ApiError as e:
            logger.warning("Could not fetch product %s (%s), trying product list", product_id, e.message)
            product = self.state.find_product(product_id)
        if product is None:
            logger.warning("Product %s not found for inventory management", product_id)
            self.state.notify("Product not found")
            return None
        self.open(product)
        return product

    def close(self) -> None:
        if self.product is not None:
            logger.info("Closing inventory for %s", self.product.id)
        self._reset()

    def _reset(self) -> None:
        self._generation += 1
        self.product = None
        self._confirmed = {}
        self._pending = {}
        self._latest = {}

    def stock(self, size: int) -> int:
        return self._pending.get(size, 0)

    def confirmed_stock(self, size: int) -> int:
        return self._confirmed.get(size, 0)

    @property
    def snapshot(self) -> Dict[int, int]:
        return dict(self._pending)

    def total_stock(self) -> int:
        return sum(self._pending.values())

    def is_pending(self, size: int) -> bool:
        return self._pending.get(size, 0) != self._confirmed.get(size, 0)

    async def adjust(self, size: int, delta: int) -> int:
        """
        Change the stock of size by delta, never below zero.

        The new value is displayed before the backend answers. Returns the
        value displayed once the write has settled. Raises ValidationError for a
        size the product does not carry, and the ApiError of a failed write
        after restoring the confirmed value.
        """
        if self.product is None:
            raise RuntimeError("No product is open for inventory management")
        if size not in self._confirmed:
            raise ValidationError(errors={"size": f"{self.product.name} has no size {size}"})

        new_stock = max(0, self.stock(size) + delta)
        self._pending[size] = new_stock
        self._seq += 1
        seq = self._latest[size] = self._seq
        product_id = self.product.id
        generation = self._generation
        lock = self._locks.setdefault((product_id, size), asyncio.Lock())

        async with lock:
            try:
                await self.client.products.update_inventory(product_id, size, new_stock)
            except ApiError as e:
                logger.error("Error updating inventory for %s size %s: %s", product_id, size, e.message)
                if generation == self._generation and self._latest.get(size) == seq:
                    self._pending[size] = self._confirmed.get(size, 0)
                self.state.notify(f"Failed to update stock for size {size}: {e.message}")
                raise

        if generation == self._generation:
            self._confirmed[size] = new_stock
        logger.info("Stock for %s size %s is now %s", product_id, size, new_stock)

        if self.on_commit is not None:
            await self.on_commit()
        return self.stock(size) if generation == self._generation else new_stock
