"""
Customer order routes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.encoders import jsonable_encoder

from vetshop.actions.notifications import notify_new_order
from vetshop.actions.orders import get_customer_order_by_id, list_customer_orders
from vetshop.api.dependencies import get_optional_session, get_state
from vetshop.api.models import OrderDetailResponse, OrderListResponse, OrderNotificationResponse
from vetshop.domain import Session, format_currency
from vetshop.exceptions import ConfigurationError

router = APIRouter(prefix="/v1/orders", tags=["orders"])


@router.get(
    "",
    response_model=OrderListResponse,
    responses={401: {"description": "Not signed in"}},
)
def list_orders(
    request: Request,
    response: Response,
    session: Optional[Session] = Depends(get_optional_session),
) -> dict:
    """Order history of the signed-in customer, newest first."""
    orders = list_customer_orders(session, get_state(request).order_repo)
    response.headers["Cache-Control"] = "no-store"
    return {
        "items": [
            {
                "id": o.id,
                "created_at": o.created_at,
                "estado": o.estado,
                "total": o.total,
                "total_display": format_currency(o.total),
            }
            for o in orders
        ]
    }


@router.get(
    "/{order_id}",
    response_model=OrderDetailResponse,
    responses={
        401: {"description": "Not signed in"},
        404: {"description": "Order not found or not owned by the caller"},
    },
)
def get_order(
    order_id: str,
    request: Request,
    response: Response,
    session: Optional[Session] = Depends(get_optional_session),
) -> dict:
    order = get_customer_order_by_id(order_id, session, get_state(request).order_repo)
    response.headers["Cache-Control"] = "no-store"
    return jsonable_encoder(order)


@router.post(
    "/{order_id}/notifications",
    response_model=OrderNotificationResponse,
    responses={
        401: {"description": "Not signed in"},
        404: {"description": "Order not found or not owned by the caller"},
    },
)
def send_order_notifications(
    order_id: str,
    request: Request,
    response: Response,
    session: Optional[Session] = Depends(get_optional_session),
) -> dict:
    """Send the confirmation email for a newly placed order, plus the shop's alert."""
    state = get_state(request)
    if state.email_sender is None:
        raise ConfigurationError("Email delivery is not configured", setting_name="RESEND_API_KEY")
    result = notify_new_order(order_id, session, state.order_repo, state.email_sender)
    response.headers["Cache-Control"] = "no-store"
    return result
