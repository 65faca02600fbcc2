"""
Repository module for backend reads.
"""

from __future__ import annotations

from vetshop.repository.appointments import AppointmentRepo
from vetshop.repository.catalog import CatalogRepo
from vetshop.repository.orders import OrderRepo
from vetshop.repository.owners import OwnerRepo

__all__ = ["AppointmentRepo", "CatalogRepo", "OrderRepo", "OwnerRepo"]
