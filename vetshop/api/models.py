"""
Pydantic models for API requests and responses.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Request Models
# =============================================================================


class LoginRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"email": "cliente@example.com", "password": "********"}]}
    )

    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)


# =============================================================================
# Order Models
# =============================================================================


class CatalogProductRef(BaseModel):
    id: str
    imagenes: Optional[list[Any]] = None


class VariantRef(BaseModel):
    id: str
    nombre: Optional[str] = None
    productos_catalogo: Optional[CatalogProductRef] = None


class OrderItemResponse(BaseModel):
    id: str
    cantidad: int
    precio_unitario: float
    producto_variantes: Optional[VariantRef] = None


class OrderDetailResponse(BaseModel):
    """A customer's order with nested items, variants and catalog products."""

    id: str
    created_at: str
    estado: str
    total: float
    direccion_envio: Optional[dict[str, Any]] = None
    items_pedido: list[OrderItemResponse] = Field(default_factory=list)


class OrderSummaryResponse(BaseModel):
    id: str
    created_at: str
    estado: str
    total: float
    total_display: str


class OrderListResponse(BaseModel):
    items: list[OrderSummaryResponse]


class OrderNotificationResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    admin_notified: bool = False


class AdminOrderRow(BaseModel):
    id: str
    created_at: str
    estado: str
    total: float
    email_cliente: Optional[str] = None
    nombre_cliente: str = ""


class AdminOrderListResponse(BaseModel):
    items: list[AdminOrderRow]
    limit: int
    offset: int


# =============================================================================
# Catalog Models
# =============================================================================


class StoreProductResponse(BaseModel):
    id: str
    producto_padre_id: str
    nombre: str
    display_name: str
    grupo: str
    precio_venta: Optional[float] = None
    precio_final: Optional[float] = None
    precio_display: str
    imagen: Optional[str] = None
    stock_total: Optional[float] = None


class StoreListResponse(BaseModel):
    items: list[StoreProductResponse]
    groups: list[str]
    total: int


class ProductDetailResponse(BaseModel):
    id: str
    nombre: str
    descripcion: Optional[str] = None
    imagenes: list[str] = Field(default_factory=list)
    variantes: list[StoreProductResponse] = Field(default_factory=list)


# =============================================================================
# Appointments / Auth
# =============================================================================


class AppointmentResponse(BaseModel):
    id: str
    fecha_hora_inicio: str
    motivo: Optional[str] = None
    estado: str
    paciente_id: str
    paciente_nombre: str


class AppointmentListResponse(BaseModel):
    items: list[AppointmentResponse]


class LoginResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    redirect_to: str
