"""
Test suite for resource fetchers
Tests: failure notifications, superseded requests
"""
import asyncio

import pytest

from admin_console.fetchers import fetch_brands

pytestmark = pytest.mark.anyio

BRANDS_PATH = "/api/admin/brands"


class TestFetchFailures:
    """How fetch failures reach the admin"""

    async def test_failure_keeps_slot_and_notifies(self, loaded, transport):
        """Test a failed fetch leaves the brands in place and posts an error"""
        transport.fail("GET", BRANDS_PATH, detail="Database unavailable")
        assert not await fetch_brands(loaded.client, loaded.state)
        assert len(loaded.state.brands.value) == 7
        assert loaded.state.notifications[-1].message == "Failed to fetch brands: Database unavailable"

    async def test_superseded_failure_is_silent(self, loaded, transport):
        """Test a request overtaken by a newer one fails without a notification"""
        before = list(loaded.state.notifications)
        hold = transport.hold("GET", BRANDS_PATH)
        slow = asyncio.create_task(fetch_brands(loaded.client, loaded.state))
        await hold.reached.wait()

        assert await fetch_brands(loaded.client, loaded.state)
        transport.fail("GET", BRANDS_PATH, detail="Database unavailable")
        hold.release()

        assert not await slow
        assert loaded.state.notifications == before
        assert len(loaded.state.brands.value) == 7
