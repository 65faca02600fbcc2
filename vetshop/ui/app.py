"""
Streamlit storefront and customer account area.

Routing is driven by the ``route`` query parameter. Each script rerun is one
frame of the loading overlay's scheduler.
"""

from __future__ import annotations

import logging

import streamlit as st

from vetshop.actions import (
    get_customer_order_by_id,
    get_store_product,
    list_admin_orders,
    list_customer_appointments,
    list_customer_orders,
    list_store_products,
)
from vetshop.api.access import evaluate_admin_access, post_login_destination
from vetshop.api.state import AppState, build_state
from vetshop.config import get_settings
from vetshop.domain import ShippingAddress, format_currency, short_order_id
from vetshop.exceptions import (
    AuthenticationRequiredError,
    AuthServiceError,
    InvalidCredentialsError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from vetshop.logging_config import LogContextManager
from vetshop.ui.loading import PageLoader, TransitionLink
from vetshop.ui.session import AuthEvents, BrowserAuth, SessionWatcher
from vetshop.ui.widgets import (
    AccountButton,
    AppointmentLink,
    LogoutButton,
    get_loading_context,
    render_link,
    render_logout_button,
)

logger = logging.getLogger(__name__)

HOME_ROUTE = "/tienda"

_OVERLAY_HTML = (
    '<div style="position:fixed;inset:0;background:#fff;opacity:.85;z-index:9999;'
    'display:flex;align-items:center;justify-content:center;">Cargando...</div>'
)


@st.cache_resource
def get_services() -> AppState:
    return build_state(get_settings())


def _auth_events() -> AuthEvents:
    if "_auth_events" not in st.session_state:
        st.session_state["_auth_events"] = AuthEvents()
    return st.session_state["_auth_events"]


def _page_loader() -> PageLoader:
    if "_page_loader" not in st.session_state:
        st.session_state["_page_loader"] = PageLoader(get_loading_context())
    return st.session_state["_page_loader"]


def current_route() -> str:
    route = st.query_params.get("route") or HOME_ROUTE
    return route if route.startswith("/") else f"/{route}"


def navigate(path: str) -> None:
    st.query_params["route"] = path
    st.rerun()


def render_header(route: str, auth: BrowserAuth, watcher: SessionWatcher) -> None:
    ctx = get_loading_context()
    cols = st.columns([4, 1, 1, 1, 1])
    cols[0].markdown(f"## 🐾 {get_settings().site_name}")

    shop = TransitionLink(HOME_ROUTE, ctx, label="Tienda")
    if cols[1].button(shop.label, key="nav_shop"):
        navigate(shop.click(route))

    with cols[2]:
        render_link(
            AppointmentLink(watcher).spec(),
            key="nav_appointment",
            on_navigate=lambda href: navigate(TransitionLink(href, ctx).click(route)),
        )
    with cols[3]:
        render_link(
            AccountButton(watcher).spec(),
            key="nav_account",
            on_navigate=lambda href: navigate(TransitionLink(href, ctx).click(route)),
        )
    if watcher.session is not None:
        with cols[4]:
            render_logout_button(LogoutButton(auth, navigate))
    st.divider()


# =============================================================================
# Store
# =============================================================================


def render_store_page(services: AppState, route: str) -> None:
    q = st.text_input("Buscar productos", key="_store_q")
    group = st.session_state.get("_store_group", "Todas")
    page = list_store_products(services.catalog_repo, query=q or None, group=None if group == "Todas" else group)
    st.selectbox("Categoría", ["Todas", *page.groups], key="_store_group")

    if not page.products:
        st.info("No se encontraron productos.")
        return

    st.caption(f"{len(page.products)} productos")
    ctx = get_loading_context()
    cols = st.columns(3)
    for i, product in enumerate(page.products):
        with cols[i % 3]:
            if product.imagen_producto_principal:
                st.image(product.imagen_producto_principal, use_container_width=True)
            st.markdown(f"**{product.display_name}**")
            st.caption(product.grupo)
            price = product.final_price
            st.write(format_currency(price) if price is not None else "Consultar")
            if st.button("Ver producto", key=f"product_{product.id}"):
                navigate(TransitionLink(f"/tienda/{product.producto_padre_id}", ctx).click(route))


def render_product_page(services: AppState, product_id: str) -> None:
    try:
        entry = get_store_product(services.catalog_repo, product_id)
    except ProductNotFoundError as e:
        st.error(e.message)
        return

    st.title(entry.nombre)
    if entry.imagenes:
        st.image(entry.imagenes[0], width=360)
    if entry.descripcion:
        st.write(entry.descripcion)
    for variant in entry.variantes:
        price = variant.final_price
        stock = "Sin stock" if not variant.stock_total else f"{variant.stock_total:g} disponibles"
        st.write(f"- {variant.nombre}: {format_currency(price) if price is not None else 'Consultar'} ({stock})")


# =============================================================================
# Auth
# =============================================================================


def render_login_page(services: AppState, auth: BrowserAuth) -> None:
    st.title("Iniciar Sesión")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Contraseña", type="password")
        submitted = st.form_submit_button("Entrar")
    if not submitted:
        return
    try:
        session = auth.sign_in(email.strip(), password)
    except InvalidCredentialsError:
        st.error("Email o contraseña incorrectos.")
        return
    except AuthServiceError:
        st.error("No se pudo conectar con el servicio de autenticación. Inténtalo más tarde.")
        return
    navigate(post_login_destination(session, services.owner_repo.get_role))


# =============================================================================
# Account
# =============================================================================


def render_orders_page(services: AppState, watcher: SessionWatcher, route: str) -> None:
    st.title("Mis Pedidos")
    orders = list_customer_orders(watcher.session, services.order_repo)
    if not orders:
        st.info("Todavía no has realizado ningún pedido.")
        return
    ctx = get_loading_context()
    for order in orders:
        cols = st.columns([2, 2, 2, 1])
        cols[0].write(f"#{short_order_id(order.id)}")
        cols[1].write(order.created_at[:10])
        cols[2].write(f"{order.estado} · {format_currency(order.total)}")
        if cols[3].button("Ver", key=f"order_{order.id}"):
            navigate(TransitionLink(f"/cuenta/pedidos/{order.id}", ctx).click(route))


def render_order_detail_page(services: AppState, watcher: SessionWatcher, order_id: str) -> None:
    try:
        order = get_customer_order_by_id(order_id, watcher.session, services.order_repo)
    except OrderNotFoundError as e:
        st.error(e.message)
        return

    st.title(f"Pedido #{short_order_id(str(order['id']))}")
    st.write(f"Estado: **{order.get('estado', '')}**")
    for item in order.get("items_pedido") or []:
        variant = item.get("producto_variantes") or {}
        qty = item.get("cantidad") or 0
        st.write(f"- {variant.get('nombre') or 'Producto'} x{qty}: {format_currency(item.get('precio_unitario'))}")
    st.write(f"**Total: {format_currency(order.get('total'))}**")
    lines = ShippingAddress.from_dict(order.get("direccion_envio")).lines()
    if lines:
        st.markdown("**Dirección de envío**  \n" + "  \n".join(lines))


def render_appointments_page(services: AppState, watcher: SessionWatcher) -> None:
    st.title("Mis Citas")
    appointments = list_customer_appointments(watcher.session, services.appointment_repo)
    if not appointments:
        st.info("No tienes citas registradas.")
        return
    for a in appointments:
        st.write(f"- {a.fecha_hora_inicio[:16].replace('T', ' ')} · {a.paciente_nombre} · {a.motivo or ''} ({a.estado})")


def render_appointment_request_page() -> None:
    st.title("Solicitar Cita")
    st.info("Para solicitar una cita, ponte en contacto con la clínica por teléfono o email.")


# =============================================================================
# Dashboard
# =============================================================================


def render_dashboard_page(services: AppState, watcher: SessionWatcher, route: str) -> None:
    decision = evaluate_admin_access(route, watcher.session, services.owner_repo.get_role)
    if not decision.allowed:
        navigate(decision.redirect_to)
        return
    st.title("Dashboard · Pedidos")
    rows = list_admin_orders(watcher.session, services.order_repo)
    if not rows:
        st.info("No hay pedidos que mostrar.")
        return
    st.dataframe(rows, use_container_width=True)


def render_route(route: str, services: AppState, auth: BrowserAuth, watcher: SessionWatcher) -> None:
    cfg = get_settings()
    parts = [p for p in route.split("/") if p]

    if cfg.is_admin_path(route):
        render_dashboard_page(services, watcher, route)
    elif route == cfg.login_path:
        render_login_page(services, auth)
    elif parts[:1] == ["tienda"] and len(parts) == 2:
        render_product_page(services, parts[1])
    elif route == cfg.public_appointment_path:
        render_appointment_request_page()
    elif parts[:1] == ["cuenta"]:
        try:
            if route == cfg.account_orders_path:
                render_orders_page(services, watcher, route)
            elif route.startswith(cfg.account_orders_path + "/"):
                render_order_detail_page(services, watcher, parts[-1])
            elif route == cfg.account_new_appointment_path:
                render_appointment_request_page()
            else:
                render_appointments_page(services, watcher)
        except AuthenticationRequiredError:
            navigate(cfg.login_path)
    else:
        render_store_page(services, route)


def main() -> None:
    st.set_page_config(page_title=get_settings().site_name, page_icon="🐾", layout="wide")

    services = get_services()
    ctx = get_loading_context()
    ctx.scheduler.tick()

    route = current_route()
    loader = _page_loader()
    loader.on_route(route)

    overlay = st.empty()
    if loader.visible:
        overlay.markdown(_OVERLAY_HTML, unsafe_allow_html=True)

    auth = BrowserAuth(services.auth_client, st.session_state, events=_auth_events())
    watcher = SessionWatcher(auth)
    watcher.mount()
    try:
        user_id = watcher.session.user.id if watcher.session else None
        with LogContextManager(user_id=user_id, endpoint=f"streamlit:{route}"):
            render_header(route, auth, watcher)
            render_route(route, services, auth, watcher)
    finally:
        watcher.unmount()

    # The page is drawn; the frame after render settles the overlay.
    ctx.scheduler.tick()
    if not loader.visible:
        overlay.empty()
