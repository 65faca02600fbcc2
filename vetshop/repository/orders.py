"""
Order reads: a customer's own orders, and the admin order list.
"""

from __future__ import annotations

import logging
from typing import Any

from vetshop.backend.database import Database
from vetshop.domain import OrderSummary

logger = logging.getLogger(__name__)

# One row per order; items, variants and catalog products are nested as JSON
# with the same shape as the backend's embedded-resource reads:
# {id, created_at, estado, total, direccion_envio,
#  items_pedido: [{id, cantidad, precio_unitario,
#                  producto_variantes: {id, nombre, productos_catalogo: {id, imagenes}}}]}
_ORDER_WITH_ITEMS_SQL = """
SELECT
    p.id,
    p.created_at,
    p.estado,
    p.total,
    p.direccion_envio,
    COALESCE(
        (
            SELECT json_agg(
                json_build_object(
                    'id', ip.id,
                    'cantidad', ip.cantidad,
                    'precio_unitario', ip.precio_unitario,
                    'producto_variantes', CASE WHEN pv.id IS NULL THEN NULL ELSE json_build_object(
                        'id', pv.id,
                        'nombre', pv.nombre,
                        'productos_catalogo', CASE WHEN pc.id IS NULL THEN NULL ELSE json_build_object(
                            'id', pc.id,
                            'imagenes', pc.imagenes
                        ) END
                    ) END
                )
                ORDER BY ip.id
            )
            FROM items_pedido ip
            LEFT JOIN producto_variantes pv ON pv.id = ip.producto_id
            LEFT JOIN productos_catalogo pc ON pc.id = pv.producto_id
            WHERE ip.pedido_id = p.id
        ),
        '[]'::json
    ) AS items_pedido
FROM pedidos p
WHERE p.id = %s AND p.propietario_id = %s
"""


class OrderRepo:
    """Read-only access to ``pedidos`` and its nested items."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_for_owner(self, order_id: str, owner_id: str) -> dict[str, Any] | None:
        """
        Fetch one order with nested items, only if ``owner_id`` placed it.

        Returns ``None`` when no row matches: a missing order and an order owned
        by somebody else look the same from here.

        Raises:
            DatabaseError: the query itself failed.
        """
        return self._db.fetch_one(
            _ORDER_WITH_ITEMS_SQL,
            (order_id, owner_id),
            user_id=owner_id,
            operation="get_order_for_owner",
            table="pedidos",
        )

    def list_for_owner(self, owner_id: str) -> list[OrderSummary]:
        """Order history for one customer, newest first."""
        rows = self._db.fetch_all(
            "SELECT id, created_at, estado, total FROM pedidos WHERE propietario_id = %s ORDER BY created_at DESC",
            (owner_id,),
            user_id=owner_id,
            operation="list_orders_for_owner",
            table="pedidos",
        )
        return [OrderSummary.from_row(row) for row in rows]

    def list_all(self, *, acting_user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        """All orders with the customer's name, for the admin dashboard."""
        return self._db.fetch_all(
            """
            SELECT p.id, p.created_at, p.estado, p.total, p.email_cliente,
                   COALESCE(pr.nombre_completo, p.direccion_envio->>'nombre_completo', '') AS nombre_cliente
            FROM pedidos p
            LEFT JOIN propietarios pr ON pr.id = p.propietario_id
            ORDER BY p.created_at DESC
            LIMIT %s OFFSET %s
            """,
            (limit, offset),
            user_id=acting_user_id,
            operation="list_all_orders",
            table="pedidos",
        )
