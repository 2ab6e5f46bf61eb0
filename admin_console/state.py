"""
In-memory state tree read by whatever renders the console.

Each independently fetched piece of data lives in a Slot. A slot hands out a
ticket per request and only accepts the response for the latest ticket, so a
slow response can never overwrite data from a newer request.
"""
import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from .schemas import Brand, Category, DashboardSummary, Order, Product, ProductPage, StoreSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Slot(Generic[T]):
    def __init__(self, name: str, initial: T):
        self.name = name
        self._initial = initial
        self.value: T = copy.copy(initial)
        self.updated_at: Optional[datetime] = None
        self._issued = 0

    def begin(self) -> int:
        self._issued += 1
        return self._issued

    def is_current(self, ticket: int) -> bool:
        return ticket == self._issued

    def apply(self, ticket: int, value: T) -> bool:
        if not self.is_current(ticket):
            logger.debug("Discarding stale %s response (ticket %s, latest %s)", self.name, ticket, self._issued)
            return False
        self.set(value)
        return True

    def set(self, value: T) -> None:
        self.value = value
        self.updated_at = utcnow()

    def reset(self) -> None:
        self._issued += 1
        self.value = copy.copy(self._initial)
        self.updated_at = None


@dataclass
class Notification:
    message: str
    level: str = "error"
    title: str = "Error"
    created_at: datetime = field(default_factory=utcnow)


class AdminState:
    def __init__(self):
        self.dashboard: Slot[Optional[DashboardSummary]] = Slot("dashboard", None)
        self.products: Slot[ProductPage] = Slot("products", ProductPage())
        self.brands: Slot[List[Brand]] = Slot("brands", [])
        self.categories: Slot[List[Category]] = Slot("categories", [])
        self.orders: Slot[List[Order]] = Slot("orders", [])
        self.featured: Slot[List[Product]] = Slot("featured", [])
        self.featured_candidates: Slot[List[Product]] = Slot("featured candidates", [])
        self.settings: Slot[Optional[StoreSettings]] = Slot("store settings", None)

        self.selected_order: Optional[Order] = None
        self.notifications: List[Notification] = []
        # set by dashboard-level refreshes, shown as "Last updated"
        self.last_updated: Optional[datetime] = None

    # Convenience accessors for the dashboard view
    @property
    def stats(self):
        return self.dashboard.value.stats if self.dashboard.value else None

    @property
    def recent_orders(self):
        return self.dashboard.value.recent_orders if self.dashboard.value else []

    @property
    def low_stock_products(self):
        return self.dashboard.value.low_stock_products if self.dashboard.value else []

    @property
    def product_list(self) -> List[Product]:
        return self.products.value.products

    @property
    def pagination(self):
        return self.products.value.pagination

    def find_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.product_list if p.id == product_id), None)

    def find_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders.value if o.id == order_id), None)

    def touch(self) -> None:
        self.last_updated = utcnow()

    def notify(self, message: str, level: str = "error", title: Optional[str] = None) -> Notification:
        note = Notification(message=message, level=level, title=title or ("Success" if level == "success" else "Error"))
        self.notifications.append(note)
        return note

    def dismiss(self, note: Notification) -> None:
        if note in self.notifications:
            self.notifications.remove(note)

    def clear(self) -> None:
        """Drop everything fetched, e.g. after logging out."""
        for slot in self.slots():
            slot.reset()
        self.selected_order = None
        self.last_updated = None

    def slots(self) -> List[Slot]:
        return [value for value in vars(self).values() if isinstance(value, Slot)]
