"""
Admin dashboard routes.

Everything under this router sits behind ``AdminAccessMiddleware``; a request
only reaches these handlers for a session whose profile is an administrator.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.encoders import jsonable_encoder

from vetshop.actions.orders import list_admin_orders
from vetshop.api.dependencies import get_required_session, get_state
from vetshop.api.models import AdminOrderListResponse
from vetshop.domain import Session

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard_home(response: Response, session: Session = Depends(get_required_session)) -> dict:
    response.headers["Cache-Control"] = "no-store"
    return {"user_id": session.user.id, "sections": {"pedidos": "/dashboard/pedidos"}}


@router.get("/pedidos", response_model=AdminOrderListResponse)
def list_all_orders(
    request: Request,
    response: Response,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(get_required_session),
) -> dict:
    rows = list_admin_orders(session, get_state(request).order_repo, limit=limit, offset=offset)
    response.headers["Cache-Control"] = "no-store"
    return {"items": jsonable_encoder(rows), "limit": limit, "offset": offset}
