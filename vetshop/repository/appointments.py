"""
Appointment reads for a customer's pets.
"""

from __future__ import annotations

from vetshop.backend.database import Database
from vetshop.domain import Appointment


class AppointmentRepo:
    def __init__(self, db: Database) -> None:
        self._db = db

    def list_for_owner(self, owner_id: str) -> list[Appointment]:
        """Appointments of every pet the owner has, newest first."""
        pets = self._db.fetch_all(
            "SELECT id, nombre FROM pacientes WHERE propietario_id = %s",
            (owner_id,),
            user_id=owner_id,
            operation="list_pets_for_owner",
            table="pacientes",
        )
        if not pets:
            return []

        pet_names = {str(p["id"]): p.get("nombre") for p in pets}
        rows = self._db.fetch_all(
            "SELECT id, fecha_hora_inicio, motivo, estado, paciente_id FROM citas "
            "WHERE paciente_id = ANY(%s) ORDER BY fecha_hora_inicio DESC",
            ([p["id"] for p in pets],),
            user_id=owner_id,
            operation="list_appointments_for_owner",
            table="citas",
        )
        return [Appointment.from_row(row, pet_names) for row in rows]
