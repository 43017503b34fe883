# ==============================================================================
# REPOSITORIO DE BANNERS
# ==============================================================================
# Encapsula todo el acceso a banners.json
# Formato: {banner_id: {datos_banner}}
# ==============================================================================

import copy
import os
import uuid
from typing import Dict, List, Optional

from catalog_admin.models import Banner
from catalog_admin.repositories.base import DictRepository


class BannerRepository(DictRepository):
    """
    Repositorio para banners promocionales.

    Formato de datos en banners.json:
    {
        "c7d1...": {
            "title": "Black Friday",
            "discount_text": "-30%",
            "active": true,
            ...
        }
    }
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de banners.

        Args:
            base_path: Directorio de datos
        """
        file_path = os.path.join(base_path, 'banners.json')
        super().__init__(file_path)

    def next_id(self) -> str:
        return uuid.uuid4().hex

    def list_banners(self) -> List[Banner]:
        """Obtiene todos los banners (sin orden particular)."""
        return [Banner.from_dict(bid, data) for bid, data in self.get_all().items()]

    def get_banner(self, banner_id: str) -> Optional[Banner]:
        data = self.get_by_id(banner_id)
        if data is None:
            return None
        return Banner.from_dict(str(banner_id), data)

    def create_banner(self, banner: Banner) -> Banner:
        self.put(banner.id, banner.to_dict())
        return banner

    def update_banner(self, banner: Banner) -> Optional[Banner]:
        """
        Reemplaza un banner existente.

        Returns:
            Banner guardado o None si no existía
        """
        if self.get_by_id(banner.id) is None:
            return None
        self.put(banner.id, banner.to_dict())
        return banner

    def set_active_flags(self, flags: Dict[str, bool]) -> None:
        """
        Cambia el flag "active" de varios banners en una sola escritura.

        Args:
            flags: {banner_id: active}; los IDs inexistentes se ignoran
        """
        data = copy.deepcopy(self.get_all())
        changed = False
        for bid, active in flags.items():
            record = data.get(str(bid))
            if record is not None and record.get('active') != active:
                record['active'] = active
                changed = True
        if changed:
            self.save_all(data)

    def delete_banner(self, banner_id: str) -> Optional[Banner]:
        removed = self.delete(banner_id)
        if removed is None:
            return None
        return Banner.from_dict(str(banner_id), removed)
