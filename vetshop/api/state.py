from __future__ import annotations

from dataclasses import dataclass

from vetshop.backend import AuthClient, Database
from vetshop.config import Settings
from vetshop.emails.sender import EmailSender
from vetshop.repository import AppointmentRepo, CatalogRepo, OrderRepo, OwnerRepo


@dataclass
class AppState:
    auth_client: AuthClient
    order_repo: OrderRepo
    owner_repo: OwnerRepo
    catalog_repo: CatalogRepo
    appointment_repo: AppointmentRepo
    email_sender: EmailSender | None = None


def build_state(cfg: Settings) -> AppState:
    """Wire the production clients and repositories for ``cfg``."""
    db = Database(settings=cfg)
    return AppState(
        auth_client=AuthClient(settings=cfg),
        order_repo=OrderRepo(db),
        owner_repo=OwnerRepo(db),
        catalog_repo=CatalogRepo(db),
        appointment_repo=AppointmentRepo(db),
        email_sender=EmailSender(settings=cfg),
    )
