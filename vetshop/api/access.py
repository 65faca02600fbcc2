"""
Access policy for the administrative dashboard.

Default-deny: a request under the admin prefix goes through only when the
session's profile is positively identified as an administrator. Any failure
to establish that (no session, lookup error, missing profile) redirects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from vetshop.config import Settings, get_settings
from vetshop.domain import Session, is_admin_role
from vetshop.exceptions import VetShopError
from vetshop.logging_config import get_logger, log_event

logger = get_logger(__name__)

RoleLookup = Callable[[str], Optional[str]]


class AccessOutcome(str, Enum):
    ALLOW = "allow"
    NO_SESSION = "no_session"
    LOOKUP_FAILED = "lookup_failed"
    NOT_ADMIN = "not_admin"


@dataclass(frozen=True)
class AccessDecision:
    outcome: AccessOutcome
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is AccessOutcome.ALLOW


_ALLOW = AccessDecision(AccessOutcome.ALLOW)


def evaluate_admin_access(
    path: str,
    session: Optional[Session],
    role_lookup: RoleLookup,
    *,
    settings: Settings | None = None,
) -> AccessDecision:
    """
    Decide what happens to a request for ``path``.

    Paths outside the admin prefix are allowed without looking at the session.
    ``role_lookup`` is only called for a present session. Anything it raises
    is treated as a failed lookup.
    """
    cfg = settings or get_settings()
    if not cfg.is_admin_path(path):
        return _ALLOW

    if session is None or not session.user.id:
        log_event("admin_access_denied", path=path, reason=AccessOutcome.NO_SESSION.value)
        return AccessDecision(AccessOutcome.NO_SESSION, cfg.login_path)

    try:
        role = role_lookup(session.user.id)
    except Exception as e:
        logger.error("[Middleware] Error al obtener el perfil: %s", e, exc_info=not isinstance(e, VetShopError))
        log_event("admin_access_denied", level="warning", path=path, user_id=session.user.id,
                  reason=AccessOutcome.LOOKUP_FAILED.value)
        return AccessDecision(AccessOutcome.LOOKUP_FAILED, cfg.login_path)

    if not is_admin_role(role, cfg.admin_role):
        log_event("admin_access_denied", path=path, user_id=session.user.id, reason=AccessOutcome.NOT_ADMIN.value)
        return AccessDecision(AccessOutcome.NOT_ADMIN, cfg.account_orders_path)

    return _ALLOW


def post_login_destination(
    session: Session,
    role_lookup: RoleLookup,
    *,
    settings: Settings | None = None,
) -> str:
    """Where to send a user right after sign-in: admins to the dashboard, everyone else to their orders."""
    cfg = settings or get_settings()
    try:
        role = role_lookup(session.user.id)
    except Exception as e:
        logger.error("Error al obtener el perfil del usuario: %s", e, exc_info=not isinstance(e, VetShopError))
        return cfg.account_orders_path
    if is_admin_role(role, cfg.admin_role):
        return cfg.admin_path_prefix
    return cfg.account_orders_path
