"""
Order server actions for the signed-in customer.
"""

from __future__ import annotations

from typing import Any, Optional

from vetshop.domain import OrderSummary, Session
from vetshop.exceptions import AuthenticationRequiredError, DatabaseError, OrderNotFoundError
from vetshop.logging_config import get_logger, log_event
from vetshop.repository.orders import OrderRepo

logger = get_logger(__name__)


def _require_session(session: Optional[Session]) -> Session:
    if session is None or not session.user or not session.user.id:
        raise AuthenticationRequiredError()
    return session


def get_customer_order_by_id(order_id: str, session: Optional[Session], repo: OrderRepo) -> dict[str, Any]:
    """
    Fetch one order for the customer who placed it.

    The read is filtered on both the order id and the session's user id.
    Whatever goes wrong after authentication (no such order, somebody else's
    order, a failed query) surfaces as the same ``OrderNotFoundError``; the
    real reason only reaches the logs.

    Raises:
        AuthenticationRequiredError: no session.
        OrderNotFoundError: nothing readable under this id for this user.
    """
    session = _require_session(session)
    user_id = session.user.id

    try:
        order = repo.get_for_owner(order_id, user_id)
    except DatabaseError as e:
        logger.error("Error fetching customer order: %s", e)
        log_event("order_lookup_denied", level="warning", order_id=order_id, user_id=user_id, reason="query_error")
        raise OrderNotFoundError(order_id) from e

    if order is None:
        log_event("order_lookup_denied", level="warning", order_id=order_id, user_id=user_id, reason="no_match")
        raise OrderNotFoundError(order_id)

    return order


def list_customer_orders(session: Optional[Session], repo: OrderRepo) -> list[OrderSummary]:
    """Order history of the signed-in customer, newest first.

    A failed read is logged and shown as an empty history.
    """
    session = _require_session(session)
    try:
        return repo.list_for_owner(session.user.id)
    except DatabaseError as e:
        logger.error("Error fetching user orders: %s", e)
        return []


def list_admin_orders(
    session: Optional[Session],
    repo: OrderRepo,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """All orders for the dashboard. Callers gate on the admin role first."""
    session = _require_session(session)
    try:
        return repo.list_all(acting_user_id=session.user.id, limit=limit, offset=offset)
    except DatabaseError as e:
        logger.error("Error fetching orders for the dashboard: %s", e)
        return []
