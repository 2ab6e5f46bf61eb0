import os
from pathlib import Path

# Backend
API_URL = os.getenv("ADMIN_API_URL", "http://localhost:5001")
REQUEST_TIMEOUT = float(os.getenv("ADMIN_REQUEST_TIMEOUT", "30"))

# Persisted bearer token
TOKEN_FILE = Path(os.getenv("ADMIN_TOKEN_FILE", str(Path.home() / ".admin_console" / "token.json")))

# Product list
PAGE_SIZE = 10
SEARCH_BATCH_LIMIT = 1000

# Inventory
LOW_STOCK_THRESHOLD = 10

# Featured products shown on the storefront home view
MAX_FEATURED_PRODUCTS = 8

CURRENCY = "INR"
CURRENCY_SYMBOL = "₹"
