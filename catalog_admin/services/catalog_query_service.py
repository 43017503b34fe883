# ==============================================================================
# SERVICIO DE CONSULTA DEL CATÁLOGO
# ==============================================================================
# Búsqueda, filtro por estado y exportación CSV de la vista filtrada.
#
# REGLA DE FILTRO:
# - "All" significa "todo MENOS Archived" (los archivados se ocultan por defecto)
# - Cualquier otro valor exige igualdad exacta con Product.status
#
# La exportación usa SOLO la vista filtrada, nunca el catálogo completo.
# ==============================================================================

import csv
import io
from datetime import date
from typing import Iterable, List, Optional

from catalog_admin.errors import ValidationError
from catalog_admin.models import Product, ProductStatus
from catalog_admin.performance_logger import profile_function


# Valor del selector que muestra todo lo no archivado
STATUS_FILTER_ALL = 'All'

VALID_STATUS_FILTERS = frozenset([STATUS_FILTER_ALL] + [s.value for s in ProductStatus])

EXPORT_HEADERS = ['Name', 'SKU', 'Category', 'Price', 'Stock', 'Status']


def matches_search(product: Product, search: str) -> bool:
    """
    Coincidencia de texto libre en nombre o SKU (insensible a mayúsculas).
    Si el producto no tiene SKU solo se compara el nombre.
    """
    q = (search or '').lower()
    if not q:
        return True
    if q in (product.name or '').lower():
        return True
    return bool(product.sku) and q in product.sku.lower()


def matches_status(product: Product, status_filter: str) -> bool:
    if status_filter == STATUS_FILTER_ALL:
        return product.status != ProductStatus.ARCHIVED.value
    return product.status == status_filter


@profile_function(name="Filtrar catálogo")
def filter_products(
    products: Iterable[Product],
    search: str = '',
    status: Optional[str] = STATUS_FILTER_ALL
) -> List[Product]:
    """
    Vista visible del catálogo.

    Args:
        products: Catálogo completo
        search: Texto a buscar en nombre o SKU
        status: "All" o un valor de ProductStatus

    Returns:
        Productos que cumplen búsqueda Y estado, en el orden recibido

    Raises:
        ValidationError: Si el filtro de estado no es válido
    """
    status_filter = status or STATUS_FILTER_ALL
    if status_filter not in VALID_STATUS_FILTERS:
        raise ValidationError('status', f"filtro de estado inválido: {status_filter}")

    return [
        p for p in products
        if matches_search(p, search) and matches_status(p, status_filter)
    ]


def export_products_csv(products: Iterable[Product]) -> str:
    """
    Tabla CSV de los productos recibidos (la vista ya filtrada).

    Los campos de texto van entre comillas y las comillas internas se
    duplican; precio y stock se escriben como números.

    Returns:
        Texto CSV con encabezado y una fila por producto
    """
    si = io.StringIO()
    writer = csv.writer(si, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)
    for p in products:
        writer.writerow([
            p.name,
            p.sku or '',
            p.category,
            p.price,
            p.stock or 0,
            p.status,
        ])
    return si.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    """Nombre de archivo de la exportación: inventory_export_YYYY-MM-DD.csv"""
    today = today or date.today()
    return f"inventory_export_{today.isoformat()}.csv"


class CatalogQueryService:
    """
    Servicio de consulta sobre el listado del almacén de productos.
    """

    def __init__(self, product_repo):
        self.product_repo = product_repo

    def search(self, search: str = '', status: Optional[str] = STATUS_FILTER_ALL) -> List[Product]:
        """Lista filtrada del catálogo actual."""
        return filter_products(self.product_repo.list_products(), search, status)

    def export(self, search: str = '', status: Optional[str] = STATUS_FILTER_ALL) -> str:
        """CSV de la misma vista que retorna search()."""
        return export_products_csv(self.search(search, status))
