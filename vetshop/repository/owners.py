"""
Owner (customer) profile reads, used for authorization only.
"""

from __future__ import annotations

import logging

from vetshop.backend.database import Database
from vetshop.exceptions import DatabaseError, ProfileLookupError

logger = logging.getLogger(__name__)


class OwnerRepo:
    def __init__(self, db: Database) -> None:
        self._db = db

    def get_role(self, user_id: str) -> str | None:
        """
        Return the raw ``rol`` of the user's profile row.

        Raises:
            ProfileLookupError: the query failed or the user has no profile row.
        """
        try:
            row = self._db.fetch_one(
                "SELECT id, rol FROM propietarios WHERE id = %s",
                (user_id,),
                user_id=user_id,
                operation="get_role",
                table="propietarios",
            )
        except DatabaseError as e:
            raise ProfileLookupError(user_id, cause=e.detail) from e
        if row is None:
            raise ProfileLookupError(user_id, cause="no profile row")
        return row.get("rol")
