"""
Store catalog reads.
"""

from __future__ import annotations

from vetshop.backend.database import Database
from vetshop.domain import CatalogEntry, StoreProduct


def _image_urls(raw) -> list[str]:
    # ``imagenes`` is a JSON array of {"url": ...} objects; tolerate bare strings.
    urls = []
    for item in raw or []:
        if isinstance(item, dict) and item.get("url"):
            urls.append(str(item["url"]))
        elif isinstance(item, str) and item:
            urls.append(item)
    return urls


class CatalogRepo:
    def __init__(self, db: Database) -> None:
        self._db = db

    def list_store_products(self) -> list[StoreProduct]:
        """Every variant on sale in the online store, ordered by name."""
        rows = self._db.fetch_all(
            "SELECT * FROM productos_inventario_con_stock WHERE en_tienda = true ORDER BY nombre ASC",
            operation="list_store_products",
            table="productos_inventario_con_stock",
        )
        return [StoreProduct.from_row(row) for row in rows]

    def get_product(self, product_id: str) -> CatalogEntry | None:
        """A store product with its variants; ``None`` if missing or not on sale."""
        product = self._db.fetch_one(
            "SELECT id, nombre, descripcion, porcentaje_impuesto, imagenes "
            "FROM productos_catalogo WHERE id = %s AND en_tienda = true",
            (product_id,),
            operation="get_product",
            table="productos_catalogo",
        )
        if product is None:
            return None

        variants = self._db.fetch_all(
            "SELECT * FROM productos_inventario_con_stock WHERE producto_padre_id = %s ORDER BY nombre ASC",
            (product_id,),
            operation="list_product_variants",
            table="productos_inventario_con_stock",
        )
        return CatalogEntry(
            id=str(product["id"]),
            nombre=product.get("nombre") or "",
            descripcion=product.get("descripcion"),
            porcentaje_impuesto=float(product.get("porcentaje_impuesto") or 0),
            imagenes=_image_urls(product.get("imagenes")),
            variantes=[StoreProduct.from_row(row) for row in variants],
        )
