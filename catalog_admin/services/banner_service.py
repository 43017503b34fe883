# ==============================================================================
# SERVICIO DE BANNERS
# ==============================================================================
# Banners promocionales de la pantalla principal de la tienda.
#
# POLÍTICA DE ACTIVACIÓN (se elige una vez, se aplica en todos los caminos):
# - exclusive : desactiva todos los demás y luego activa el elegido
#               → como máximo un banner activo (modo por defecto)
# - advisory  : solo activa el elegido; pueden quedar varios activos
#               (comportamiento histórico del panel)
#
# No es transaccional: dos operadores activando a la vez pueden pisarse
# (gana la última escritura).
# ==============================================================================

from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from catalog_admin.errors import NotFoundError, ValidationError
from catalog_admin.models import Banner
from catalog_admin.repositories.interfaces import IBannerRepository
from catalog_admin.services.audit_service import AuditService


MODE_EXCLUSIVE = 'exclusive'
MODE_ADVISORY = 'advisory'


class BannerActivationPolicy:
    """
    Política de exclusividad del flag "active".

    Calcula qué flags hay que escribir para activar un banner; el servicio
    los aplica en una sola escritura al repositorio.
    """

    def __init__(self, mode: str = MODE_EXCLUSIVE):
        if mode not in (MODE_EXCLUSIVE, MODE_ADVISORY):
            raise ValidationError('banner_activation_mode', f'modo inválido: {mode}')
        self.mode = mode

    @property
    def is_exclusive(self) -> bool:
        return self.mode == MODE_EXCLUSIVE

    def activation_flags(self, banners: List[Banner], target_id: str) -> Dict[str, bool]:
        """
        Args:
            banners: Todos los banners actuales
            target_id: Banner a activar

        Returns:
            {banner_id: active} con los cambios a escribir
        """
        flags = {target_id: True}
        if self.is_exclusive:
            for banner in banners:
                if banner.id != target_id and banner.active:
                    flags[banner.id] = False
        return flags


def sort_banners(banners: List[Banner]) -> List[Banner]:
    """Activos primero; dentro de cada grupo, más recientes primero."""
    by_date = sorted(banners, key=lambda b: b.created_at, reverse=True)
    return sorted(by_date, key=lambda b: not b.active)


class BannerService:
    """
    Servicio para gestión de banners.

    Responsabilidades:
    - Alta, activación, desactivación y borrado
    - Aplicar la política de activación elegida
    """

    def __init__(
        self,
        banner_repo: IBannerRepository,
        mode_loader: Optional[Callable[[], str]] = None,
        audit_service: AuditService = None
    ):
        """
        Args:
            banner_repo: Repositorio de banners
            mode_loader: Devuelve el modo vigente (por defecto exclusive)
            audit_service: Servicio de auditoría (opcional)
        """
        self.banner_repo = banner_repo
        self.mode_loader = mode_loader
        self.audit_service = audit_service

    @property
    def policy(self) -> BannerActivationPolicy:
        if self.mode_loader is None:
            return BannerActivationPolicy()
        return BannerActivationPolicy(self.mode_loader())

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def list_banners(self) -> List[Banner]:
        return sort_banners(self.banner_repo.list_banners())

    def get_banner(self, banner_id: str) -> Banner:
        """
        Raises:
            NotFoundError: Si el banner no existe
        """
        banner = self.banner_repo.get_banner(banner_id)
        if banner is None:
            raise NotFoundError('Banner', banner_id)
        return banner

    def get_active_banner(self) -> Optional[Banner]:
        """Banner que ve el cliente: el activo más reciente, o None."""
        for banner in self.list_banners():
            if banner.active:
                return banner
        return None

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def create_banner(self, fields: Dict[str, Any], user: str = None) -> Banner:
        """
        Crea un banner. Si viene con active=True pasa por la política.

        Raises:
            ValidationError: Si falta el título
        """
        title = fields.get('title')
        if not isinstance(title, str) or not title.strip():
            raise ValidationError('title', 'es requerido')

        product_id = fields.get('product_id') or None
        banner = Banner(
            id=self.banner_repo.next_id(),
            title=title.strip(),
            subtitle=str(fields.get('subtitle') or ''),
            discount_text=str(fields.get('discount_text') or ''),
            image_url=str(fields.get('image_url') or ''),
            product_id=str(product_id) if product_id else None,
            active=False
        )
        self.banner_repo.create_banner(banner)

        if self.audit_service and user:
            self.audit_service.log_banner_created(user, banner.id, banner.title)

        if fields.get('active'):
            return self.activate(banner.id, user)
        return banner

    EDITABLE_FIELDS = ('title', 'subtitle', 'discount_text', 'image_url', 'product_id')

    def update_banner(self, banner_id: str, fields: Dict[str, Any], user: str = None) -> Banner:
        """
        Edición parcial del contenido del banner. Un "active" en los campos
        se aplica después, a través de activate/deactivate y su política.

        Raises:
            NotFoundError: Si el banner no existe
            ValidationError: Si el título queda vacío
        """
        banner = self.get_banner(banner_id)
        changes = {key: fields[key] for key in self.EDITABLE_FIELDS if key in fields}

        if 'title' in changes:
            title = changes['title']
            if not isinstance(title, str) or not title.strip():
                raise ValidationError('title', 'es requerido')
            changes['title'] = title.strip()
        if 'product_id' in changes:
            changes['product_id'] = str(changes['product_id']) if changes['product_id'] else None
        for key in ('subtitle', 'discount_text', 'image_url'):
            if key in changes:
                changes[key] = str(changes[key] or '')

        changes = {key: value for key, value in changes.items() if getattr(banner, key) != value}
        if changes:
            updated = replace(banner, **changes)
            if self.banner_repo.update_banner(updated) is None:
                raise NotFoundError('Banner', banner_id)
            if self.audit_service and user:
                self.audit_service.log_banner_updated(user, banner.id, updated.title, changes)

        if 'active' in fields:
            if fields['active']:
                return self.activate(banner_id, user)
            return self.deactivate(banner_id, user)
        return self.get_banner(banner_id)

    def activate(self, banner_id: str, user: str = None) -> Banner:
        """
        Activa un banner según la política vigente.

        Raises:
            NotFoundError: Si el banner no existe
        """
        target = self.get_banner(banner_id)
        flags = self.policy.activation_flags(self.banner_repo.list_banners(), target.id)
        self.banner_repo.set_active_flags(flags)

        if self.audit_service and user:
            cleared = [bid for bid, active in flags.items() if not active]
            self.audit_service.log_banner_activated(user, target.id, target.title, cleared)
        return self.get_banner(banner_id)

    def deactivate(self, banner_id: str, user: str = None) -> Banner:
        target = self.get_banner(banner_id)
        if not target.active:
            return target
        self.banner_repo.set_active_flags({target.id: False})

        if self.audit_service and user:
            self.audit_service.log_banner_deactivated(user, target.id, target.title)
        return self.get_banner(banner_id)

    def delete_banner(self, banner_id: str, user: str = None) -> Banner:
        """
        Raises:
            NotFoundError: Si el banner no existe
        """
        removed = self.banner_repo.delete_banner(banner_id)
        if removed is None:
            raise NotFoundError('Banner', banner_id)

        if self.audit_service and user:
            self.audit_service.log_banner_deleted(user, removed.id, removed.title)
        return removed
