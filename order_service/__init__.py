"""Order service: product summary fan-out over the inventory and price services."""
