"""
Resource fetchers.

Each fetcher calls the API and replaces its slot wholesale. On failure it logs,
posts a notification and leaves whatever the slot held before; there is no
retry. The failure of a request that has since been superseded is dropped
quietly. Fetchers return True when the slot was updated.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, TypeVar

from .api_client import ApiClient
from .config import PAGE_SIZE, SEARCH_BATCH_LIMIT
from .errors import ApiError
from .schemas import ProductPage
from .state import AdminState, Slot

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _fetch(state: AdminState, slot: Slot[T], call: Callable[[], Awaitable[T]]) -> bool:
    ticket = slot.begin()
    try:
        value = await call()
    except ApiError as e:
        if not slot.is_current(ticket):
            logger.debug("Ignoring failure of superseded %s request: %s", slot.name, e.message)
            return False
        logger.error("Error fetching %s: %s", slot.name, e.message)
        state.notify(f"Failed to fetch {slot.name}: {e.message}")
        return False
    return slot.apply(ticket, value)


async def fetch_dashboard(client: ApiClient, state: AdminState) -> bool:
    """Stats, recent orders and low-stock products arrive together."""
    updated = await _fetch(state, state.dashboard, client.dashboard.summary)
    if updated:
        state.touch()
    return updated


async def fetch_product_page(client: ApiClient, state: AdminState, page: int, limit: int = PAGE_SIZE) -> bool:
    return await _fetch(state, state.products, lambda: client.products.list(page=page, limit=limit))


def filter_by_name(products, query: str):
    needle = query.strip().lower()
    return [p for p in products if needle in p.name.lower()]


async def fetch_product_matches(client: ApiClient, state: AdminState, query: str) -> bool:
    """Fetch one large batch and keep only products whose name contains the query."""

    async def call():
        batch = await client.products.list(limit=SEARCH_BATCH_LIMIT)
        matches = filter_by_name(batch.products, query)
        logger.debug("Search %r: %d of %d products match", query, len(matches), len(batch.products))
        return ProductPage(products=matches, pagination=None)

    return await _fetch(state, state.products, call)


async def fetch_brands(client: ApiClient, state: AdminState) -> bool:
    return await _fetch(state, state.brands, client.brands.list)


async def fetch_categories(client: ApiClient, state: AdminState) -> bool:
    return await _fetch(state, state.categories, client.categories.list)


async def fetch_orders(client: ApiClient, state: AdminState) -> bool:
    return await _fetch(state, state.orders, client.orders.list)


async def fetch_featured_products(client: ApiClient, state: AdminState) -> bool:
    return await _fetch(state, state.featured, client.featured.list)


async def fetch_featured_candidates(client: ApiClient, state: AdminState) -> bool:
    return await _fetch(state, state.featured_candidates, client.featured.candidates)


async def fetch_store_settings(client: ApiClient, state: AdminState) -> bool:
    return await _fetch(state, state.settings, client.settings.get)


async def settle(*fetches: Awaitable[bool]) -> List[bool]:
    """
    Run a composite refresh: all fetches concurrently, wait for every one.

    Results are not atomic across fetches; each slot updates as its own
    response lands.
    """
    results = await asyncio.gather(*fetches, return_exceptions=True)
    settled = []
    for result in results:
        if isinstance(result, BaseException):
            logger.error("Refresh failed: %r", result)
            settled.append(False)
        else:
            settled.append(result)
    return settled
