# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Taxonomía de fallos que los servicios propagan hacia quien los llama
# (rutas Flask, scripts, tests). Ninguno se silencia ni se reintenta aquí.
# ==============================================================================

from typing import List, Optional


class CatalogError(Exception):
    """Base de todos los errores del panel de catálogo."""
    pass


class NotFoundError(CatalogError):
    """El ID de la entidad no existe en el almacenamiento."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' no encontrado")


class ReferentialConflictError(CatalogError):
    """
    Borrado bloqueado porque hay registros que todavía referencian la entidad.

    Hoy solo aplica a productos citados por ítems de pedidos. La salida
    correcta para el operador es archivar el producto en lugar de borrarlo.
    """

    REMEDIATION = (
        "Este producto no se puede eliminar porque existe en pedidos anteriores. "
        "Archívelo en su lugar."
    )

    def __init__(self, product_id: str, order_ids: Optional[List[str]] = None):
        self.product_id = product_id
        self.order_ids = list(order_ids or [])
        super().__init__(
            f"Producto '{product_id}' referenciado por {len(self.order_ids)} pedido(s)"
        )


class ValidationError(CatalogError):
    """Campo requerido ausente o con valor inválido."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UploadError(CatalogError):
    """Falló la transferencia de una imagen."""
    pass


class TransientStoreError(CatalogError):
    """El almacenamiento no está disponible (disco, red, permisos)."""
    pass
