# ==============================================================================
# SERVICIO DE ESTADO DE STOCK Y ESTADÍSTICAS DEL CATÁLOGO
# ==============================================================================
# Calcula la categoría de stock que ve el operador a partir del número de
# unidades. Es un valor DERIVADO: se recalcula en cada lectura y nunca
# sobrescribe Product.status (ese campo lo decide el operador).
#
# REGLA:
# - stock == 0                  → Out of Stock
# - 0 < stock < umbral          → Low Stock
# - stock >= umbral             → In Stock
#
# Las estadísticas del panel se recalculan completas en cada llamada.
# ==============================================================================

from typing import Any, Callable, Dict, Iterable, List, Optional

from catalog_admin.errors import ValidationError
from catalog_admin.models import Product, StockStatus
from catalog_admin.performance_logger import profile_function


# Umbral por defecto de stock bajo
DEFAULT_LOW_STOCK_THRESHOLD = 10


def derive_stock_status(stock: int, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> StockStatus:
    """
    Categoría de stock para un número de unidades.

    Args:
        stock: Unidades en inventario (>= 0)
        threshold: Umbral de stock bajo (>= 1)

    Returns:
        StockStatus correspondiente

    Raises:
        ValidationError: Si stock es negativo o el umbral es menor a 1
    """
    if stock < 0:
        raise ValidationError('stock', 'no puede ser negativo')
    if threshold < 1:
        raise ValidationError('low_stock_threshold', 'debe ser mayor a 0')

    if stock == 0:
        return StockStatus.OUT_OF_STOCK
    if stock < threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


@profile_function(name="Estadísticas del catálogo")
def compute_dashboard_stats(
    products: Iterable[Product],
    threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
) -> Dict[str, Any]:
    """
    Estadísticas agregadas del catálogo completo.

    Args:
        products: Todos los productos (sin filtrar)
        threshold: Umbral de stock bajo

    Returns:
        Dict con product_count, low_stock_count (incluye agotados),
        total_value (suma de precio * stock) y total_stock
    """
    product_count = 0
    low_stock_count = 0
    total_value = 0.0
    total_stock = 0

    for product in products:
        stock = product.stock or 0
        product_count += 1
        if stock < threshold:
            low_stock_count += 1
        total_value += (product.price or 0) * stock
        total_stock += stock

    return {
        'product_count': product_count,
        'low_stock_count': low_stock_count,
        'total_value': round(total_value, 2),
        'total_stock': total_stock,
    }


class StockStatusService:
    """
    Servicio de estado de stock.

    Une el cálculo puro con el umbral configurado por el operador
    y con el listado de productos del almacén.
    """

    def __init__(self, product_repo, threshold_loader: Optional[Callable[[], int]] = None):
        """
        Args:
            product_repo: Repositorio de productos
            threshold_loader: Función que retorna el umbral vigente
        """
        self.product_repo = product_repo
        self._threshold_loader = threshold_loader

    @property
    def threshold(self) -> int:
        if self._threshold_loader:
            return self._threshold_loader()
        return DEFAULT_LOW_STOCK_THRESHOLD

    def annotate(self, products: Iterable[Product]) -> List[Dict[str, Any]]:
        """
        Vista de lectura: cada producto con su stock_status derivado
        junto al status guardado (ambos se exponen, sin mezclarse).
        """
        threshold = self.threshold
        result = []
        for product in products:
            data = product.to_dict()
            data['stock_status'] = derive_stock_status(product.stock or 0, threshold).value
            result.append(data)
        return result

    def get_dashboard_stats(self) -> Dict[str, Any]:
        """Estadísticas del catálogo completo con el umbral vigente."""
        threshold = self.threshold
        stats = compute_dashboard_stats(self.product_repo.list_products(), threshold)
        stats['low_stock_threshold'] = threshold
        return stats
