"""
Test suite for display helpers
"""
from admin_console.formatting import format_inr, group_indian, short_id, total_stock
from admin_console.schemas import ProductSize


class TestFormatInr:
    """Rupee amounts"""

    def test_indian_grouping(self):
        """Test lakh and crore grouping"""
        assert format_inr(123456) == "₹1,23,456"
        assert format_inr(10000000) == "₹1,00,00,000"
        assert format_inr(999) == "₹999"
        assert format_inr(1000) == "₹1,000"

    def test_rounds_to_whole_rupees(self):
        """Test fractions round half up"""
        assert format_inr(1234.5) == "₹1,235"
        assert format_inr(8999.0) == "₹8,999"
        assert format_inr(0.4) == "₹0"

    def test_empty_and_negative(self):
        """Test missing and negative amounts"""
        assert format_inr(None) == "₹0"
        assert format_inr(-2500) == "-₹2,500"

    def test_group_indian(self):
        """Test the digit grouping on its own"""
        assert group_indian("1") == "1"
        assert group_indian("1234567") == "12,34,567"


class TestHelpers:
    """Small display helpers"""

    def test_total_stock(self):
        """Test stock is summed across sizes"""
        assert total_stock([ProductSize(size=7, stock=5), ProductSize(size=8, stock=16)]) == 21
        assert total_stock([]) == 0

    def test_short_id(self):
        """Test order ids are shortened to their tail"""
        assert short_id("65f1c2a9e4b0a1b2c3d4e5f6") == "#d4e5f6"
