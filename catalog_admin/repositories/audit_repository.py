# ==============================================================================
# REPOSITORIO DE AUDITORÍA - audit.json
# ==============================================================================
# Lista de eventos, el más reciente al principio. Se recorta a MAX_LOGS
# en cada escritura.
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from catalog_admin.models import utc_now_iso
from .base import ListRepository


class AuditRepository(ListRepository):
    """
    Eventos de auditoría del panel.

    Cada entrada:
        {
            "type": "PEDIDO",
            "user": "ops@tmax.com",
            "message": "Pedido a91f...: PENDING → SHIPPED por ops@tmax.com",
            "timestamp": "2024-01-01T10:00:00.000000+00:00",
            "related_id": "a91f...",
            "details": {"from": "PENDING", "to": "SHIPPED"}
        }
    """

    MAX_LOGS = 10000

    SEARCH_FIELDS = ('user', 'message', 'related_id')

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'audit.json'))

    def load(self) -> List[Dict[str, Any]]:
        """Todos los eventos, del más nuevo al más viejo."""
        return sorted(self.get_all(), key=lambda entry: entry.get('timestamp', ''), reverse=True)

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Antepone un evento a la lista.

        Args:
            log_type: PRODUCTO, PEDIDO, BANNER o AJUSTES
            user: Email del operador ('sistema' si no hay)
            message: Texto legible del evento
            related_id: Entidad afectada
            details: Datos extra (estado anterior/nuevo, IDs desactivados...)
        """
        entry = {
            'type': log_type,
            'user': user or 'sistema',
            'message': message,
            'timestamp': utc_now_iso(),
            'related_id': related_id,
            'details': details or {},
        }
        with self._file_lock:
            self.save_all(([entry] + self.get_all())[:self.MAX_LOGS])

    def search_logs(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Coincidencia parcial, sin distinguir mayúsculas, en usuario, mensaje o ID."""
        needle = (query or '').strip().lower()
        logs = self.load()
        if not needle:
            return logs
        return [
            entry for entry in logs
            if any(needle in str(entry.get(field) or '').lower() for field in self.SEARCH_FIELDS)
        ]
