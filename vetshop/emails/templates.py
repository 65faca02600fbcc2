"""
HTML rendering for transactional emails.

Pure functions: every value is HTML-escaped and nothing here does I/O.
"""

from __future__ import annotations

import html
from decimal import Decimal
from typing import Any, Iterable, Optional

from vetshop.config import get_settings
from vetshop.domain import ShippingAddress, format_currency, short_order_id

_MAIN_STYLE = "background-color:#f6f9fc;font-family:Arial,sans-serif;"
_CONTAINER_STYLE = "background-color:#ffffff;margin:0 auto;padding:20px;border-radius:5px;max-width:600px;"
_HEADING_STYLE = "font-size:24px;line-height:1.3;font-weight:700;color:#484848;"
_PARAGRAPH_STYLE = "font-size:16px;line-height:1.4;color:#484848;"
_INFO_STYLE = "padding:20px;background-color:#f2f2f2;border-radius:5px;"
_HR_STYLE = "border:none;border-top:1px solid #e6ebf1;margin:20px 0;"
_FOOTER_STYLE = "color:#8898aa;font-size:12px;line-height:15px;"
_LINK_STYLE = "color:#007bff;text-decoration:none;"


def _total_display(total: Any) -> str:
    if isinstance(total, (int, float, Decimal)) and not isinstance(total, bool):
        return format_currency(total)
    return f"{total} €"


def _document(preview: str, body: str) -> str:
    """Wrap ``body`` in the shared email layout with a hidden preview line."""
    return f"""<!DOCTYPE html>
<html lang="es">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
</head>
<body style="{_MAIN_STYLE}">
<div style="display:none;max-height:0;overflow:hidden;">{html.escape(preview)}</div>
<div style="{_CONTAINER_STYLE}">
{body}
</div>
</body>
</html>
"""


def render_admin_order_notification(
    order_id: str,
    order_total: Any,
    *,
    site_url: Optional[str] = None,
) -> str:
    """
    Render the "new order" notification sent to the shop administrators.

    Args:
        order_id: Order identifier, shown in full and used in the dashboard link.
        order_total: Numeric total (formatted as euros) or an already formatted string.
        site_url: Site base URL for the dashboard link; defaults to ``SITE_BASE_URL``.
    """
    base = (site_url if site_url is not None else get_settings().site_base_url).rstrip("/")
    order_e = html.escape(str(order_id))
    link_e = html.escape(f"{base}/dashboard/pedidos/{order_id}", quote=True)
    body = f"""<h1 style="{_HEADING_STYLE}">¡Nuevo Pedido!</h1>
<p style="{_PARAGRAPH_STYLE}">Has recibido un nuevo pedido en tu tienda.</p>
<div style="{_INFO_STYLE}">
<p style="{_PARAGRAPH_STYLE}"><strong>ID del Pedido:</strong> {order_e}</p>
<p style="{_PARAGRAPH_STYLE}"><strong>Total:</strong> {html.escape(_total_display(order_total))}</p>
</div>
<hr style="{_HR_STYLE}" />
<a href="{link_e}" style="{_LINK_STYLE}">Ver detalles del pedido en el dashboard</a>"""
    return _document("¡Nuevo pedido recibido!", body)


def _items_table(items: Iterable[dict]) -> str:
    rows = []
    for item in items:
        name = html.escape(str(item.get("nombre") or ""))
        qty = int(item.get("cantidad") or 0)
        line_total = float(item.get("precio_final_unitario") or 0) * qty
        rows.append(
            f'<tr><td style="{_PARAGRAPH_STYLE}">{name} (x{qty})</td>'
            f'<td style="{_PARAGRAPH_STYLE}text-align:right;">{html.escape(format_currency(line_total))}</td></tr>'
        )
    if not rows:
        return ""
    return f'<table width="100%" cellpadding="0" cellspacing="0">{"".join(rows)}</table>\n<hr style="{_HR_STYLE}" />'


def render_customer_order_confirmation(
    customer_name: str,
    order_id: str,
    order_total: Any,
    shipping_address: ShippingAddress | dict | None,
    *,
    items: Iterable[dict] = (),
    site_url: Optional[str] = None,
) -> str:
    """Render the order confirmation sent to the customer after checkout."""
    cfg = get_settings()
    base = (site_url if site_url is not None else cfg.site_base_url).rstrip("/")
    address = (
        shipping_address
        if isinstance(shipping_address, ShippingAddress)
        else ShippingAddress.from_dict(shipping_address)
    )
    address_html = "<br/>".join(html.escape(line) for line in address.lines())
    site_name_e = html.escape(cfg.site_name)
    body = f"""<img src="{html.escape(base, quote=True)}/static/logo.png" width="120" alt="{site_name_e}" />
<h1 style="{_HEADING_STYLE}">¡Gracias por tu pedido, {html.escape(customer_name or address.nombre_completo)}!</h1>
<p style="{_PARAGRAPH_STYLE}">Hemos recibido tu pedido y ya lo estamos preparando. Te notificaremos cuando se haya enviado.</p>
{_items_table(items)}
<div style="{_INFO_STYLE}">
<p style="{_PARAGRAPH_STYLE}"><strong>ID del Pedido:</strong> {html.escape(str(order_id))}</p>
<p style="{_PARAGRAPH_STYLE}"><strong>Total:</strong> {html.escape(_total_display(order_total))}</p>
<p style="{_PARAGRAPH_STYLE}"><strong>Dirección de envío:</strong><br/>{address_html}</p>
</div>
<hr style="{_HR_STYLE}" />
<p style="{_FOOTER_STYLE}">Si tienes alguna pregunta, no dudes en contactarnos.</p>
<a href="{html.escape(base or '/', quote=True)}" style="{_LINK_STYLE}">{site_name_e}</a>"""
    return _document(f"Confirmación de tu pedido en {cfg.site_name} #{short_order_id(str(order_id))}", body)
