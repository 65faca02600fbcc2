"""
Delivery of rendered emails through the Resend HTTP API.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import requests

from vetshop.config import Settings, get_settings
from vetshop.domain import ShippingAddress, short_order_id
from vetshop.emails.templates import render_admin_order_notification, render_customer_order_confirmation
from vetshop.exceptions import ConfigurationError, EmailDeliveryError
from vetshop.logging_config import log_event

logger = logging.getLogger(__name__)


class EmailSender:
    """
    Sends HTML emails. Every send returns ``{"success": bool, "error": str | None}``;
    delivery problems are logged and reported in the result, never raised.
    """

    def __init__(
        self,
        api_key: str | None = None,
        from_address: str | None = None,
        *,
        http: requests.Session | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = api_key if api_key is not None else self._settings.resend_api_key
        self._from = from_address or self._settings.email_from
        self._http = http or requests.Session()

    def _post(self, to: list[str], subject: str, html: str) -> str | None:
        """Post one message; returns the provider message id."""
        if not self._api_key:
            raise ConfigurationError("Missing API key for the email provider", setting_name="RESEND_API_KEY")
        try:
            response = self._http.post(
                self._settings.resend_api_url,
                json={"from": self._from, "to": to, "subject": subject, "html": html},
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._settings.http_timeout_seconds,
            )
        except requests.RequestException as e:
            raise EmailDeliveryError(str(e)) from e

        if response.status_code >= 400:
            try:
                reason = response.json().get("message") or response.text
            except ValueError:
                reason = response.text
            raise EmailDeliveryError(reason or f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            return response.json().get("id")
        except ValueError:
            return None

    def send(self, to: str | list[str], subject: str, html: str) -> dict[str, Any]:
        recipients = [to] if isinstance(to, str) else list(to)
        try:
            message_id = self._post(recipients, subject, html)
        except (EmailDeliveryError, ConfigurationError) as e:
            logger.error("Failed to send email: %s", e)
            return {"success": False, "error": getattr(e, "reason", None) or e.message}

        log_event("email_sent", subject=subject, message_id=message_id, recipients=len(recipients))
        return {"success": True, "error": None}

    def send_order_confirmation(
        self,
        to: str,
        *,
        order_id: str,
        customer_name: str,
        order_total: Any,
        shipping_address: ShippingAddress | dict | None,
        items: Iterable[dict] = (),
    ) -> dict[str, Any]:
        html = render_customer_order_confirmation(
            customer_name,
            order_id,
            order_total,
            shipping_address,
            items=items,
            site_url=self._settings.site_base_url,
        )
        return self.send(to, f"Confirmación de tu pedido #{short_order_id(order_id)}", html)

    def send_admin_order_notification(self, *, order_id: str, order_total: Any) -> dict[str, Any]:
        """Notify the shop inbox of a new order; skipped when no inbox is configured."""
        to = self._settings.admin_notification_email
        if not to:
            logger.info("No admin notification address configured; skipping order %s", order_id)
            return {"success": False, "error": "admin_notification_email not configured"}
        html = render_admin_order_notification(order_id, order_total, site_url=self._settings.site_base_url)
        return self.send(to, f"Nuevo pedido #{short_order_id(order_id)}", html)
