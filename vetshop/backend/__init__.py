"""
Clients for the hosted backend: auth service and PostgreSQL database.
"""

from __future__ import annotations

from vetshop.backend.auth import AuthClient
from vetshop.backend.database import Database

__all__ = ["AuthClient", "Database"]
