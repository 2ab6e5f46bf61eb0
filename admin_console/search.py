"""
Product list: paginated browsing and name search.

Both modes write to the same state slot, so switching modes makes any
in-flight fetch of the other mode stale.
"""
import logging

from .api_client import ApiClient
from .config import PAGE_SIZE
from .fetchers import fetch_product_matches, fetch_product_page
from .state import AdminState

logger = logging.getLogger(__name__)


class ProductListController:
    def __init__(self, client: ApiClient, state: AdminState, page_size: int = PAGE_SIZE):
        self.client = client
        self.state = state
        self.page_size = page_size
        self.current_page = 1
        self.query = ""
        self.is_searching = False

    @property
    def show_pagination(self) -> bool:
        return not self.is_searching and self.state.pagination is not None

    @property
    def has_next(self) -> bool:
        pagination = self.state.pagination
        return self.show_pagination and pagination.has_next

    @property
    def has_prev(self) -> bool:
        pagination = self.state.pagination
        return self.show_pagination and pagination.has_prev

    async def load_page(self, page: int) -> bool:
        self.is_searching = False
        self.current_page = max(1, page)
        return await fetch_product_page(self.client, self.state, self.current_page, self.page_size)

    async def next_page(self) -> bool:
        if not self.has_next:
            return False
        return await self.load_page(self.current_page + 1)

    async def prev_page(self) -> bool:
        if not self.has_prev:
            return False
        return await self.load_page(self.current_page - 1)

    async def search(self, query: str) -> bool:
        query = query.strip()
        if not query:
            return False
        logger.info("Searching products for %r", query)
        self.query = query
        self.is_searching = True
        self.current_page = 1
        return await fetch_product_matches(self.client, self.state, query)

    async def clear_search(self) -> bool:
        self.query = ""
        return await self.load_page(1)

    async def reload(self) -> bool:
        """Re-run whichever mode is active."""
        if self.is_searching:
            return await fetch_product_matches(self.client, self.state, self.query)
        return await fetch_product_page(self.client, self.state, self.current_page, self.page_size)
