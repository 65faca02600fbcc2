"""
VetShop domain model: records read from the hosted backend and the pure
helpers around them (roles, store category groups, prices and euro formatting).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

ADMIN_ROLE = "administrador"

# Store category groups, matched against lowercase product names.
CATEGORY_GROUPS: dict[str, tuple[str, ...]] = {
    "Alimentación": ("pienso", "comida", "húmeda", "snack", "premio", "alimento", "nutrición", "lenda"),
    "Salud y Bienestar": ("salud", "antiparasitario", "suplemento", "vitamina", "dental", "medicamento"),
    "Paseo": ("arnés", "arnes", "collar", "correa"),
    "Descanso": ("cama", "colchón", "cesta"),
    "Juguetes": ("juguete", "pelota", "mordedor", "rascador", "interactivo"),
    "Accesorios": ("accesorio", "comedero", "bebedero", "transportín", "ropa"),
    "Higiene": ("higiene", "arena", "champú", "cepillo", "toallita", "limpieza", "arenero", "empapador"),
}
DEFAULT_CATEGORY_GROUP = "Otros"


def normalize_role(role: Optional[str]) -> str:
    """Return the role in canonical form (trimmed, lowercase); missing roles become ''."""
    return (role or "").strip().lower()


def is_admin_role(role: Optional[str], admin_role: str = ADMIN_ROLE) -> bool:
    return normalize_role(role) == normalize_role(admin_role)


def category_group(product_name: str) -> str:
    """Classify a product into a store group by keywords in its name.

    Groups are checked in declaration order; the first keyword hit wins.
    """
    name = (product_name or "").lower()
    for group, keywords in CATEGORY_GROUPS.items():
        if any(keyword in name for keyword in keywords):
            return group
    return DEFAULT_CATEGORY_GROUP


def price_with_tax(price: Optional[float], tax_percent: Optional[float]) -> Optional[float]:
    if price is None:
        return None
    return float(price) * (1 + float(tax_percent or 0) / 100)


def format_currency(amount: Any) -> str:
    """Format an amount as Spanish-locale euros, e.g. ``1.234,50 €``.

    Non-numeric input renders as ``0,00 €``.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)
    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer, _, cents = f"{abs(value):.2f}".partition(".")
    groups = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)
    return f"{sign}{'.'.join(groups)},{cents} €"


def short_order_id(order_id: str) -> str:
    return (order_id or "")[:8]


# =============================================================================
# Auth
# =============================================================================


@dataclass(frozen=True)
class User:
    id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Session:
    """Authenticated identity issued by the auth backend."""

    access_token: str
    user: User
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now.timestamp() >= self.expires_at


@dataclass(frozen=True)
class Owner:
    id: str
    rol: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.rol)


# =============================================================================
# Orders
# =============================================================================


@dataclass
class ShippingAddress:
    nombre_completo: str = ""
    direccion: str = ""
    localidad: str = ""
    provincia: str = ""
    codigo_postal: str = ""
    telefono: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Optional[dict]) -> "ShippingAddress":
        raw = raw or {}
        full_name = raw.get("nombre_completo") or " ".join(
            part for part in (raw.get("nombre"), raw.get("apellidos")) if part
        )
        return cls(
            nombre_completo=full_name or "",
            direccion=raw.get("direccion") or "",
            localidad=raw.get("localidad") or "",
            provincia=raw.get("provincia") or "",
            codigo_postal=raw.get("codigo_postal") or "",
            telefono=raw.get("telefono"),
        )

    def lines(self) -> list[str]:
        city_line = ", ".join(part for part in (self.localidad, self.provincia, self.codigo_postal) if part)
        return [line for line in (self.nombre_completo, self.direccion, city_line) if line]


@dataclass
class OrderSummary:
    """Row of the customer's order history."""

    id: str
    created_at: str
    estado: str
    total: float

    @classmethod
    def from_row(cls, row: dict) -> "OrderSummary":
        created = row.get("created_at")
        return cls(
            id=str(row["id"]),
            created_at=created.isoformat() if isinstance(created, datetime) else str(created or ""),
            estado=row.get("estado") or "",
            total=float(row.get("total") or 0),
        )


# =============================================================================
# Catalog
# =============================================================================


@dataclass
class StoreProduct:
    """A sellable variant row from the stock-aware inventory view."""

    id: str
    producto_padre_id: str
    nombre: str
    precio_venta: Optional[float] = None
    porcentaje_impuesto: float = 0.0
    imagen_producto_principal: Optional[str] = None
    stock_total: Optional[float] = None
    grupo: str = DEFAULT_CATEGORY_GROUP

    @classmethod
    def from_row(cls, row: dict) -> "StoreProduct":
        nombre = row.get("nombre") or ""
        precio = row.get("precio_venta")
        stock = row.get("stock_total")
        return cls(
            id=str(row.get("id")),
            producto_padre_id=str(row.get("producto_padre_id")),
            nombre=nombre,
            precio_venta=float(precio) if precio is not None else None,
            porcentaje_impuesto=float(row.get("porcentaje_impuesto") or 0),
            imagen_producto_principal=row.get("imagen_producto_principal"),
            stock_total=float(stock) if stock is not None else None,
            grupo=category_group(nombre),
        )

    @property
    def display_name(self) -> str:
        # Variant rows are named "<product> - <variant>"
        return self.nombre.split(" - ")[0]

    @property
    def final_price(self) -> Optional[float]:
        return price_with_tax(self.precio_venta, self.porcentaje_impuesto)


@dataclass
class CatalogEntry:
    """A catalog product with its variants, for the product detail page."""

    id: str
    nombre: str
    descripcion: Optional[str] = None
    porcentaje_impuesto: float = 0.0
    imagenes: list[str] = field(default_factory=list)
    variantes: list[StoreProduct] = field(default_factory=list)


# =============================================================================
# Appointments
# =============================================================================


@dataclass
class Appointment:
    id: str
    fecha_hora_inicio: str
    motivo: Optional[str]
    estado: str
    paciente_id: str
    paciente_nombre: str

    @classmethod
    def from_row(cls, row: dict, pet_names: dict[str, Optional[str]]) -> "Appointment":
        start = row.get("fecha_hora_inicio")
        pet_id = str(row.get("paciente_id"))
        return cls(
            id=str(row.get("id")),
            fecha_hora_inicio=start.isoformat() if isinstance(start, datetime) else str(start or ""),
            motivo=row.get("motivo"),
            estado=row.get("estado") or "",
            paciente_id=pet_id,
            paciente_nombre=pet_names.get(pet_id) or "Mascota no especificada",
        )
