# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Beneficios:
#   - Type hints para mejor documentación y autocompletado
#   - Fácil serialización/deserialización para JSON
#   - Independiente del mecanismo de persistencia
# ==============================================================================

from .entities import (
    # Catálogo
    Product,
    ProductStatus,
    ProductCategory,
    StockStatus,
    MAX_PRODUCT_IMAGES,

    # Pedidos
    Order,
    OrderItem,
    OrderStatus,

    # Banners
    Banner,

    # Identidad
    Principal,

    # Utilidades
    utc_now_iso,
)

__all__ = [
    'Product',
    'ProductStatus',
    'ProductCategory',
    'StockStatus',
    'MAX_PRODUCT_IMAGES',
    'Order',
    'OrderItem',
    'OrderStatus',
    'Banner',
    'Principal',
    'utc_now_iso',
]
