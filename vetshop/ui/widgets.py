"""
Session-aware navigation widgets.

Each widget computes a ``LinkSpec`` from its ``SessionWatcher``; the
``render_*`` helpers draw a spec with Streamlit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import streamlit as st

from vetshop.config import Settings, get_settings
from vetshop.ui.loading import LoadingContext
from vetshop.ui.session import BrowserAuth, SessionWatcher


@dataclass(frozen=True)
class LinkSpec:
    href: Optional[str]
    label: str
    title: str = ""
    disabled: bool = False


class AccountButton:
    def __init__(self, watcher: SessionWatcher, *, settings: Settings | None = None) -> None:
        self.watcher = watcher
        self.settings = settings or get_settings()

    def spec(self) -> LinkSpec:
        if self.watcher.session is not None:
            return LinkSpec(self.settings.account_orders_path, "Mi Cuenta", title="Mi Cuenta")
        return LinkSpec(self.settings.login_path, "Iniciar Sesión", title="Iniciar Sesión")


class AppointmentLink:
    """Appointment entry point; disabled until the session is known."""

    def __init__(self, watcher: SessionWatcher, label: str = "Pedir cita", *, settings: Settings | None = None) -> None:
        self.watcher = watcher
        self.label = label
        self.settings = settings or get_settings()

    def spec(self) -> LinkSpec:
        if self.watcher.loading:
            return LinkSpec(None, self.label, disabled=True)
        if self.watcher.session is not None:
            return LinkSpec(self.settings.account_new_appointment_path, self.label)
        return LinkSpec(self.settings.public_appointment_path, self.label)


class LogoutButton:
    label = "Cerrar Sesión"

    def __init__(
        self,
        auth: BrowserAuth,
        navigate: Callable[[str], None],
        *,
        settings: Settings | None = None,
    ) -> None:
        self.auth = auth
        self.navigate = navigate
        self.settings = settings or get_settings()

    def click(self) -> None:
        self.auth.sign_out()
        self.navigate(self.settings.login_path)


# =============================================================================
# Streamlit rendering
# =============================================================================


def render_link(spec: LinkSpec, *, key: str, on_navigate: Callable[[str], None]) -> None:
    if spec.disabled or not spec.href:
        st.button(spec.label, key=key, disabled=True, help=spec.title or None)
        return
    if st.button(spec.label, key=key, help=spec.title or None):
        on_navigate(spec.href)


def render_logout_button(button: LogoutButton, *, key: str = "logout") -> None:
    if st.button(button.label, key=key):
        button.click()


def get_loading_context() -> LoadingContext:
    """The loading context of the current browser session."""
    if "_loading_context" not in st.session_state:
        st.session_state["_loading_context"] = LoadingContext()
    return st.session_state["_loading_context"]
