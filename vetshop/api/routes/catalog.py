"""
Public store catalog routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from vetshop.actions.catalog import get_store_product, list_store_products
from vetshop.api.dependencies import get_app_settings, get_state
from vetshop.api.models import ProductDetailResponse, StoreListResponse
from vetshop.domain import StoreProduct, format_currency

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])


def _product_payload(product: StoreProduct) -> dict:
    final_price = product.final_price
    return {
        "id": product.id,
        "producto_padre_id": product.producto_padre_id,
        "nombre": product.nombre,
        "display_name": product.display_name,
        "grupo": product.grupo,
        "precio_venta": product.precio_venta,
        "precio_final": round(final_price, 2) if final_price is not None else None,
        "precio_display": format_currency(final_price) if final_price is not None else "Consultar",
        "imagen": product.imagen_producto_principal,
        "stock_total": product.stock_total,
    }


@router.get("/products", response_model=StoreListResponse)
def list_products(
    request: Request,
    response: Response,
    q: str = Query(default="", max_length=200),
    categoria: str | None = Query(default=None, max_length=80),
) -> dict:
    page = list_store_products(
        get_state(request).catalog_repo,
        query=q.strip() or None,
        group=categoria or None,
        settings=get_app_settings(request),
    )
    response.headers["Cache-Control"] = "public, max-age=60"
    return {
        "items": [_product_payload(p) for p in page.products],
        "groups": page.groups,
        "total": len(page.products),
    }


@router.get(
    "/products/{product_id}",
    response_model=ProductDetailResponse,
    responses={404: {"description": "Product not found"}},
)
def get_product(product_id: str, request: Request, response: Response) -> dict:
    entry = get_store_product(get_state(request).catalog_repo, product_id, settings=get_app_settings(request))
    response.headers["Cache-Control"] = "public, max-age=60"
    return {
        "id": entry.id,
        "nombre": entry.nombre,
        "descripcion": entry.descripcion,
        "imagenes": entry.imagenes,
        "variantes": [_product_payload(v) for v in entry.variantes],
    }
