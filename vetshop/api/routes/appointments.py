from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from vetshop.actions.appointments import list_customer_appointments
from vetshop.api.dependencies import get_optional_session, get_state
from vetshop.api.models import AppointmentListResponse
from vetshop.domain import Session

router = APIRouter(prefix="/v1/appointments", tags=["appointments"])


@router.get("", response_model=AppointmentListResponse, responses={401: {"description": "Not signed in"}})
def list_appointments(
    request: Request,
    response: Response,
    session: Optional[Session] = Depends(get_optional_session),
) -> dict:
    """Appointments for the signed-in customer's pets."""
    appointments = list_customer_appointments(session, get_state(request).appointment_repo)
    response.headers["Cache-Control"] = "no-store"
    return {"items": [asdict(a) for a in appointments]}
