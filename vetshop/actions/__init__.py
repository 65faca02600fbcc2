"""
Server actions: authenticated, parameterized reads called by the API and the UI.
"""

from __future__ import annotations

from vetshop.actions.appointments import list_customer_appointments
from vetshop.actions.catalog import build_store_page, get_store_product, list_store_products
from vetshop.actions.notifications import notify_new_order
from vetshop.actions.orders import get_customer_order_by_id, list_admin_orders, list_customer_orders

__all__ = [
    "build_store_page",
    "get_customer_order_by_id",
    "get_store_product",
    "list_admin_orders",
    "list_customer_appointments",
    "list_customer_orders",
    "list_store_products",
    "notify_new_order",
]
