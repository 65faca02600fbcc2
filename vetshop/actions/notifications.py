"""
New-order notifications: the customer's confirmation and the shop's alert.
"""

from __future__ import annotations

from typing import Any, Optional

from vetshop.actions.orders import get_customer_order_by_id
from vetshop.domain import Session, ShippingAddress
from vetshop.emails.sender import EmailSender
from vetshop.logging_config import get_logger, log_event
from vetshop.repository.orders import OrderRepo

logger = get_logger(__name__)


def _email_items(order: dict[str, Any]) -> list[dict[str, Any]]:
    items = []
    for item in order.get("items_pedido") or []:
        variant = item.get("producto_variantes") or {}
        items.append(
            {
                "nombre": variant.get("nombre") or "Producto",
                "cantidad": item.get("cantidad") or 0,
                "precio_final_unitario": item.get("precio_unitario") or 0,
            }
        )
    return items


def notify_new_order(
    order_id: str,
    session: Optional[Session],
    repo: OrderRepo,
    sender: EmailSender,
) -> dict[str, Any]:
    """
    Email the order confirmation to the customer and alert the shop inbox.

    The order is read through the same owner-scoped lookup as the order page,
    so only the customer who placed it can trigger the emails. Delivery
    problems come back in the result; ``success`` reflects the customer email.

    Raises:
        AuthenticationRequiredError: no session.
        OrderNotFoundError: nothing readable under this id for this user.
    """
    order = get_customer_order_by_id(order_id, session, repo)
    address = ShippingAddress.from_dict(order.get("direccion_envio"))
    total = order.get("total")

    email_to = session.user.email
    if email_to:
        result = sender.send_order_confirmation(
            email_to,
            order_id=order_id,
            customer_name=address.nombre_completo,
            order_total=total,
            shipping_address=address,
            items=_email_items(order),
        )
    else:
        logger.warning("No email address for user %s; order %s confirmation not sent", session.user.id, order_id)
        result = {"success": False, "error": "customer email unknown"}

    admin = sender.send_admin_order_notification(order_id=order_id, order_total=total)
    log_event(
        "order_notifications",
        order_id=order_id,
        customer_sent=result["success"],
        admin_sent=admin["success"],
    )
    return {"success": result["success"], "error": result["error"], "admin_notified": admin["success"]}
