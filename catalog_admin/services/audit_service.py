# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Centraliza toda la lógica de registro de auditoría.
# Formatea mensajes humanizados y categoriza eventos.
# ==============================================================================

from typing import Any, Dict, List, Optional

from catalog_admin.errors import TransientStoreError
from catalog_admin.repositories.interfaces import IAuditRepository


class AuditService:
    """
    Servicio para registro y consulta de auditoría.

    Centraliza:
    - Registro de eventos con mensajes humanizados
    - Categorización de eventos (PRODUCTO, PEDIDO, BANNER, AJUSTES)
    - Búsqueda de logs
    """

    # Tipos de eventos de auditoría
    TYPE_PRODUCTO = 'PRODUCTO'
    TYPE_PEDIDO = 'PEDIDO'
    TYPE_BANNER = 'BANNER'
    TYPE_AJUSTES = 'AJUSTES'

    def __init__(self, audit_repo: IAuditRepository):
        """
        Inicializa el servicio de auditoría.

        Args:
            audit_repo: Repositorio de auditoría
        """
        self.audit_repo = audit_repo

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Registra un evento de auditoría genérico.

        Se llama después de confirmar la escritura de la entidad: un fallo
        del almacén de auditoría se avisa por consola y no se propaga.
        """
        try:
            self.audit_repo.log(log_type, user, message, related_id, details)
        except TransientStoreError as e:
            print(f"[AUDITORÍA] Evento no registrado ({log_type}, {related_id}): {e}")

    # --- Productos -----------------------------------------------------------

    def log_product_created(self, user: str, product_id: str, name: str) -> None:
        message = f"Producto '{name}' creado por {user}"
        self.log(self.TYPE_PRODUCTO, user, message, product_id, {'name': name})

    def log_product_updated(
        self,
        user: str,
        product_id: str,
        name: str,
        changes: Dict[str, Any]
    ) -> None:
        """
        Registra la edición de un producto.

        Args:
            changes: Campos modificados con su nuevo valor
        """
        fields = ', '.join(sorted(changes.keys())) or 'sin cambios'
        message = f"Producto '{name}' editado por {user} ({fields})"
        self.log(self.TYPE_PRODUCTO, user, message, product_id, {'changes': changes})

    def log_product_archived(self, user: str, product_id: str, name: str) -> None:
        message = f"Producto '{name}' archivado por {user}"
        self.log(self.TYPE_PRODUCTO, user, message, product_id)

    def log_product_deleted(self, user: str, product_id: str, name: str) -> None:
        message = f"Producto '{name}' eliminado por {user}"
        self.log(self.TYPE_PRODUCTO, user, message, product_id)

    # --- Pedidos -------------------------------------------------------------

    def log_order_status_change(
        self,
        user: str,
        order_id: str,
        old_status: str,
        new_status: str
    ) -> None:
        message = f"Pedido {order_id}: {old_status} → {new_status} por {user}"
        self.log(
            self.TYPE_PEDIDO,
            user,
            message,
            order_id,
            {'from': old_status, 'to': new_status}
        )

    def log_order_deleted(self, user: str, order_id: str, status: str) -> None:
        message = f"Pedido {order_id} ({status}) eliminado por {user}"
        self.log(self.TYPE_PEDIDO, user, message, order_id, {'status': status})

    # --- Banners -------------------------------------------------------------

    def log_banner_created(self, user: str, banner_id: str, title: str) -> None:
        message = f"Banner '{title}' creado por {user}"
        self.log(self.TYPE_BANNER, user, message, banner_id)

    def log_banner_updated(self, user: str, banner_id: str, title: str, changes: Dict[str, Any]) -> None:
        message = f"Banner '{title}' editado por {user} ({', '.join(sorted(changes))})"
        self.log(self.TYPE_BANNER, user, message, banner_id, {'changes': changes})

    def log_banner_activated(
        self,
        user: str,
        banner_id: str,
        title: str,
        cleared: List[str]
    ) -> None:
        """
        Registra la activación de un banner.

        Args:
            cleared: IDs de banners desactivados por la política exclusiva
        """
        message = f"Banner '{title}' activado por {user}"
        if cleared:
            message += f" - {len(cleared)} banner(s) desactivado(s)"
        self.log(self.TYPE_BANNER, user, message, banner_id, {'cleared': cleared})

    def log_banner_deactivated(self, user: str, banner_id: str, title: str) -> None:
        message = f"Banner '{title}' desactivado por {user}"
        self.log(self.TYPE_BANNER, user, message, banner_id)

    def log_banner_deleted(self, user: str, banner_id: str, title: str) -> None:
        message = f"Banner '{title}' eliminado por {user}"
        self.log(self.TYPE_BANNER, user, message, banner_id)

    # --- Ajustes -------------------------------------------------------------

    def log_setting_changed(self, user: str, key: str, old: Any, new: Any) -> None:
        message = f"Ajuste '{key}': {old} → {new} por {user}"
        self.log(self.TYPE_AJUSTES, user, message, key, {'from': old, 'to': new})

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def get_recent(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Obtiene los eventos más recientes."""
        return self.audit_repo.load()[:limit]

    def search(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Busca eventos por texto libre."""
        return self.audit_repo.search_logs(query)
