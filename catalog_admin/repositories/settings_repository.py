# ==============================================================================
# REPOSITORIO DE AJUSTES DEL PANEL - settings.json
# ==============================================================================
# Claves planas; la validación de valores vive en SettingsService.
# ==============================================================================

import os
from typing import Any, Dict

from .base import DictRepository


class SettingsRepository(DictRepository):
    """
    Formato de settings.json:
        {
            "low_stock_threshold": 10,
            "theme": "dark",
            "banner_activation_mode": "exclusive"
        }
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'settings.json'))

    def load(self) -> Dict[str, Any]:
        return self.get_all()

    def save_settings(self, values: Dict[str, Any]) -> None:
        """Fusiona `values` con lo guardado en una sola escritura."""
        with self._file_lock:
            data = dict(self.get_all())
            data.update(values)
            self.save_all(data)
