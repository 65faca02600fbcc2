"""
Store catalog listing: group, filter and de-duplicate sellable variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from vetshop.config import Settings, get_settings
from vetshop.domain import CatalogEntry, StoreProduct
from vetshop.exceptions import DatabaseError, ProductNotFoundError
from vetshop.logging_config import get_logger
from vetshop.repository.catalog import CatalogRepo

logger = get_logger(__name__)


@dataclass
class StorePage:
    products: list[StoreProduct] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)


def build_store_page(
    products: list[StoreProduct],
    *,
    query: Optional[str] = None,
    group: Optional[str] = None,
) -> StorePage:
    """
    Reduce variant rows to one card per parent product.

    ``groups`` lists every group present before filtering, so the filter bar
    keeps offering all of them. When several variants of the same parent
    survive the filters, the last one in name order represents the product.
    """
    groups = sorted({p.grupo for p in products})

    filtered = products
    if query:
        needle = query.lower()
        filtered = [p for p in filtered if needle in p.nombre.lower()]
    if group:
        filtered = [p for p in filtered if p.grupo == group]

    by_parent: dict[str, StoreProduct] = {}
    for product in filtered:
        by_parent[product.producto_padre_id] = product

    return StorePage(products=list(by_parent.values()), groups=groups)


def list_store_products(
    repo: CatalogRepo,
    *,
    query: Optional[str] = None,
    group: Optional[str] = None,
    settings: Settings | None = None,
) -> StorePage:
    cfg = settings or get_settings()
    try:
        products = repo.list_store_products()
    except DatabaseError as e:
        logger.error("Error fetching all store products: %s", e)
        products = []

    for product in products:
        if not cfg.is_allowed_image_url(product.imagen_producto_principal):
            product.imagen_producto_principal = None

    return build_store_page(products, query=query, group=group)


def get_store_product(repo: CatalogRepo, product_id: str, *, settings: Settings | None = None) -> CatalogEntry:
    cfg = settings or get_settings()
    try:
        entry = repo.get_product(product_id)
    except DatabaseError as e:
        logger.error("Error fetching store product %s: %s", product_id, e)
        raise ProductNotFoundError(product_id) from e
    if entry is None:
        raise ProductNotFoundError(product_id)
    entry.imagenes = [url for url in entry.imagenes if cfg.is_allowed_image_url(url)]
    for variant in entry.variantes:
        if not cfg.is_allowed_image_url(variant.imagen_producto_principal):
            variant.imagen_producto_principal = None
    return entry
