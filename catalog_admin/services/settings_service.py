# ==============================================================================
# SERVICIO DE CONFIGURACIÓN DEL PANEL
# ==============================================================================
# Configuración local del proceso con ciclo explícito:
#   load()     → se lee una vez al arrancar (AppContainer)
#   apply      → los servicios consultan el objeto en memoria
#   persist    → los cambios de una operación se escriben juntos, y solo
#                después se reemplaza la copia en memoria
#
# Claves:
#   low_stock_threshold     → umbral de stock bajo (entero >= 1, por defecto 10)
#   theme                   → 'dark' o 'light'
#   banner_activation_mode  → 'exclusive' o 'advisory'
# ==============================================================================

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from catalog_admin.errors import ValidationError
from catalog_admin.repositories.interfaces import ISettingsRepository
from catalog_admin.services.audit_service import AuditService
from catalog_admin.services.product_service import parse_count
from catalog_admin.services.stock_status_service import DEFAULT_LOW_STOCK_THRESHOLD


VALID_THEMES = frozenset(['dark', 'light'])
VALID_BANNER_MODES = frozenset(['exclusive', 'advisory'])


@dataclass(frozen=True)
class AppSettings:
    """Instantánea inmutable de la configuración vigente."""
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    theme: str = 'dark'
    banner_activation_mode: str = 'exclusive'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'low_stock_threshold': self.low_stock_threshold,
            'theme': self.theme,
            'banner_activation_mode': self.banner_activation_mode,
        }


def _parse_threshold(value: Any) -> int:
    threshold = parse_count('low_stock_threshold', value)
    if threshold < 1:
        raise ValidationError('low_stock_threshold', 'debe ser mayor a 0')
    return threshold


def _parse_theme(value: Any) -> str:
    theme = str(value or '').strip().lower()
    if theme not in VALID_THEMES:
        raise ValidationError('theme', "debe ser 'dark' o 'light'")
    return theme


def _parse_banner_mode(value: Any) -> str:
    mode = str(value or '').strip().lower()
    if mode not in VALID_BANNER_MODES:
        raise ValidationError('banner_activation_mode', "debe ser 'exclusive' o 'advisory'")
    return mode


_PARSERS = {
    'low_stock_threshold': _parse_threshold,
    'theme': _parse_theme,
    'banner_activation_mode': _parse_banner_mode,
}


class SettingsService:
    """
    Servicio de configuración.

    Mantiene una copia en memoria (AppSettings) que solo se reemplaza
    después de que el repositorio confirmó la escritura.
    """

    def __init__(
        self,
        settings_repo: ISettingsRepository,
        audit_service: AuditService = None
    ):
        self.settings_repo = settings_repo
        self.audit_service = audit_service
        self._current: Optional[AppSettings] = None

    # =========================================================================
    # CARGA
    # =========================================================================

    def load(self) -> AppSettings:
        """
        Lee la configuración desde el almacenamiento.
        Valores guardados inválidos se reemplazan por los valores por defecto.
        """
        raw = self.settings_repo.load()
        defaults = AppSettings()

        try:
            threshold = _parse_threshold(raw.get('low_stock_threshold', defaults.low_stock_threshold))
        except ValidationError:
            threshold = defaults.low_stock_threshold

        theme = raw.get('theme', defaults.theme)
        if theme not in VALID_THEMES:
            theme = defaults.theme

        mode = raw.get('banner_activation_mode', defaults.banner_activation_mode)
        if mode not in VALID_BANNER_MODES:
            mode = defaults.banner_activation_mode

        self._current = AppSettings(
            low_stock_threshold=threshold,
            theme=theme,
            banner_activation_mode=mode
        )
        return self._current

    @property
    def current(self) -> AppSettings:
        if self._current is None:
            return self.load()
        return self._current

    def get_low_stock_threshold(self) -> int:
        return self.current.low_stock_threshold

    def get_theme(self) -> str:
        return self.current.theme

    def get_banner_activation_mode(self) -> str:
        return self.current.banner_activation_mode

    # =========================================================================
    # CAMBIOS
    # =========================================================================

    def _persist(self, values: Dict[str, Any], user: str = None) -> AppSettings:
        """
        Escribe los valores ya validados en una sola operación del almacén
        y recién entonces reemplaza la copia en memoria.
        """
        current = self.current
        changed = {key: value for key, value in values.items() if getattr(current, key) != value}
        if not changed:
            return current

        self.settings_repo.save_settings(changed)
        self._current = replace(current, **changed)

        if self.audit_service and user:
            for key, value in changed.items():
                self.audit_service.log_setting_changed(user, key, getattr(current, key), value)
        return self._current

    def update(self, changes: Dict[str, Any], user: str = None, toggle_theme: bool = False) -> AppSettings:
        """
        Aplica varios cambios; valida todos antes de escribir y los guarda
        juntos. Claves desconocidas se ignoran.

        Args:
            changes: Subconjunto de claves de AppSettings
            toggle_theme: Alterna el tema vigente (un 'theme' explícito manda)

        Raises:
            ValidationError: Si algún valor es inválido (no se guarda nada)
        """
        validated = {
            key: parser(changes[key])
            for key, parser in _PARSERS.items()
            if key in changes
        }
        if toggle_theme and 'theme' not in validated:
            validated['theme'] = 'light' if self.current.theme == 'dark' else 'dark'
        return self._persist(validated, user)
