"""Order service configuration, read from the environment."""

import os

INVENTORY_URL = os.getenv("INVENTORY_URL", "http://localhost:8001")
PRICE_URL = os.getenv("PRICE_URL", "http://localhost:8002")
UPSTREAM_TIMEOUT_MS = int(os.getenv("UPSTREAM_TIMEOUT_MS", "5000"))
PRODUCT_CATALOG = os.getenv("PRODUCT_CATALOG", "")
DISCONNECT_POLL_MS = int(os.getenv("DISCONNECT_POLL_MS", "100"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
