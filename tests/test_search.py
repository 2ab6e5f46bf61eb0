"""
Test suite for the product list
Tests: pagination, name search, clearing search, stale responses
"""
import asyncio

import pytest

from admin_console.config import SEARCH_BATCH_LIMIT
from admin_console.fetchers import filter_by_name

pytestmark = pytest.mark.anyio

PRODUCTS_PATH = "/api/admin/products"


class TestPagination:
    """Paginated browsing"""

    async def test_first_page(self, loaded):
        """Test the initial load shows page 1 of 2 with controls"""
        controller = loaded.product_list
        assert len(loaded.state.product_list) == 10
        assert loaded.state.pagination.current_page == 1
        assert loaded.state.pagination.total_pages == 2
        assert loaded.state.pagination.total_products == 12
        assert controller.show_pagination
        assert controller.has_next
        assert not controller.has_prev

    async def test_next_and_previous_page(self, loaded, transport):
        """Test moving between pages fetches each page"""
        controller = loaded.product_list
        assert await controller.next_page()
        assert controller.current_page == 2
        assert [p.name for p in loaded.state.product_list] == ["Pegasus 40", "Forum Low"]
        assert not controller.has_next

        assert not await controller.next_page()
        assert await controller.prev_page()
        assert controller.current_page == 1
        pages = [params.get("page") for m, p, params in transport.calls if p == PRODUCTS_PATH]
        assert pages == ["2", "1"]

    async def test_failed_page_fetch_keeps_previous_page(self, loaded, transport):
        """Test a failed fetch leaves the listed products in place"""
        before = loaded.state.product_list
        transport.fail("GET", PRODUCTS_PATH, status_code=503, detail="Service unavailable")
        assert not await loaded.product_list.next_page()
        assert loaded.state.product_list == before
        assert "Service unavailable" in loaded.state.notifications[-1].message


class TestSearch:
    """Name search over one large batch"""

    async def test_search_matches_names_case_insensitively(self, loaded, transport):
        """Test "air" finds exactly the two Air products and hides pagination"""
        controller = loaded.product_list
        await controller.search("air")

        assert sorted(p.name for p in loaded.state.product_list) == ["Air Force 1", "Air Max 90"]
        assert controller.is_searching
        assert not controller.show_pagination
        assert loaded.state.pagination is None
        _, _, params = transport.calls[-1]
        assert params["limit"] == str(SEARCH_BATCH_LIMIT)
        assert "search" not in params

    async def test_search_filters_on_name_only(self, loaded):
        """Test a brand match is not a name match"""
        await loaded.product_list.search("nike")
        assert loaded.state.product_list == []

    async def test_search_covers_every_page(self, loaded):
        """Test a product listed on page 2 is found by name"""
        assert loaded.state.pagination.current_page == 1
        assert await loaded.product_list.search("forum")
        assert [p.name for p in loaded.state.product_list] == ["Forum Low"]

    async def test_blank_query_does_not_enter_search_mode(self, loaded, transport):
        """Test whitespace-only queries are ignored"""
        assert not await loaded.product_list.search("   ")
        assert not loaded.product_list.is_searching
        assert transport.calls == []

    async def test_clear_search_restores_first_page(self, loaded):
        """Test clearing returns to page 1 with pagination shown"""
        controller = loaded.product_list
        await controller.next_page()
        await controller.search("AIR")
        await controller.clear_search()

        assert not controller.is_searching
        assert controller.current_page == 1
        assert controller.show_pagination
        assert loaded.state.pagination.current_page == 1
        assert len(loaded.state.product_list) == 10

    async def test_reload_keeps_search_mode(self, loaded, transport):
        """Test refreshing while searching re-runs the search"""
        await loaded.product_list.search("air")
        transport.calls.clear()
        await loaded.product_list.reload()
        assert transport.calls[-1][2]["limit"] == str(SEARCH_BATCH_LIMIT)
        assert loaded.product_list.is_searching
        assert len(loaded.state.product_list) == 2

    def test_filter_by_name(self):
        """Test the local name filter"""

        class Item:
            def __init__(self, name):
                self.name = name

        items = [Item("Air Max 90"), Item("Classic Runner"), Item("Air Force 1")]
        assert [i.name for i in filter_by_name(items, " aIr ")] == ["Air Max 90", "Air Force 1"]


class TestStaleResponses:
    """Responses for superseded requests are dropped"""

    async def test_slow_page_does_not_overwrite_newer_page(self, loaded, transport):
        """Test a page 2 response landing after page 1 is discarded"""
        controller = loaded.product_list
        hold = transport.hold("GET", PRODUCTS_PATH, params={"page": 2})

        slow = asyncio.create_task(controller.load_page(2))
        await hold.reached.wait()
        assert await controller.load_page(1)
        hold.release()

        assert not await slow
        assert loaded.state.pagination.current_page == 1
        assert named_first(loaded) == "Air Max 90"

    async def test_search_suppresses_in_flight_page_fetch(self, loaded, transport):
        """Test entering search mode discards a pending paginated fetch"""
        controller = loaded.product_list
        hold = transport.hold("GET", PRODUCTS_PATH, params={"page": 2})

        slow = asyncio.create_task(controller.load_page(2))
        await hold.reached.wait()
        await controller.search("air")
        hold.release()

        assert not await slow
        assert loaded.state.pagination is None
        assert len(loaded.state.product_list) == 2

    async def test_page_fetch_suppresses_in_flight_search(self, loaded, transport):
        """Test clearing a search discards a pending search batch"""
        controller = loaded.product_list
        hold = transport.hold("GET", PRODUCTS_PATH, params={"limit": SEARCH_BATCH_LIMIT})

        slow = asyncio.create_task(controller.search("air"))
        await hold.reached.wait()
        await controller.clear_search()
        hold.release()

        assert not await slow
        assert loaded.state.pagination is not None
        assert len(loaded.state.product_list) == 10


def named_first(console):
    return console.state.product_list[0].name
