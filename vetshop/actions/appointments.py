from __future__ import annotations

from typing import Optional

from vetshop.domain import Appointment, Session
from vetshop.exceptions import AuthenticationRequiredError, DatabaseError
from vetshop.logging_config import get_logger
from vetshop.repository.appointments import AppointmentRepo

logger = get_logger(__name__)


def list_customer_appointments(session: Optional[Session], repo: AppointmentRepo) -> list[Appointment]:
    """Appointments of the signed-in customer's pets; a failed read yields an empty list."""
    if session is None:
        raise AuthenticationRequiredError()
    try:
        return repo.list_for_owner(session.user.id)
    except DatabaseError as e:
        logger.error("Error al cargar las citas: %s", e)
        return []
