# ==============================================================================
# CONTENEDOR - Cableado de repositorios y servicios del panel
# ==============================================================================
# Una sola instancia por proceso. Cada dependencia se construye la primera
# vez que se pide y se reutiliza después.
#
# Otro almacén (SQL, API remota) solo exige repositorios que cumplan las
# interfaces de repositories/interfaces.py; los servicios no cambian.
#
# settings.json se lee una vez al crear SettingsService. El umbral de
# stock y el modo de banners se consultan en vivo sobre esa copia.
# ==============================================================================

import os
from typing import Optional

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia
# ═══════════════════════════════════════════════════════════════════════════════
from catalog_admin.repositories import (
    ProductRepository,
    OrderRepository,
    BannerRepository,
    AuditRepository,
    SettingsRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from catalog_admin.services import (
    AuditService,
    SettingsService,
    StockStatusService,
    ProductService,
    OrderService,
    BannerService,
    CatalogQueryService,
    AccessService,
    LocalImageUploader,
)


def default_data_dir() -> str:
    """Directorio de datos: CATALOG_DATA_DIR o ./data junto al paquete."""
    return os.environ.get('CATALOG_DATA_DIR') or os.path.join(
        os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data'
    )


class AppContainer:
    """
    Singleton con las dependencias del panel de catálogo.

    Uso:
        container = AppContainer(base_path='/path/to/data')
        product_service = container.product_service
        order_service = container.order_service
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: str = None, identity_provider=None):
        """Devuelve siempre la misma instancia."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: str = None, identity_provider=None):
        """
        Inicializa el contenedor.

        Args:
            base_path: Directorio donde viven los JSON
            identity_provider: Proveedor de identidad (IIdentityProvider)
        """
        if self._initialized:
            return

        self._base_path = base_path or default_data_dir()
        self._identity_provider = identity_provider

        # Repositorios (lazy loading)
        self._product_repo: Optional[ProductRepository] = None
        self._order_repo: Optional[OrderRepository] = None
        self._banner_repo: Optional[BannerRepository] = None
        self._audit_repo: Optional[AuditRepository] = None
        self._settings_repo: Optional[SettingsRepository] = None

        # Servicios (lazy loading)
        self._audit_service: Optional[AuditService] = None
        self._settings_service: Optional[SettingsService] = None
        self._stock_status_service: Optional[StockStatusService] = None
        self._product_service: Optional[ProductService] = None
        self._order_service: Optional[OrderService] = None
        self._banner_service: Optional[BannerService] = None
        self._catalog_query_service: Optional[CatalogQueryService] = None
        self._access_service: Optional[AccessService] = None
        self._image_uploader: Optional[LocalImageUploader] = None

        self._initialized = True

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def upload_dir(self) -> str:
        return os.path.join(self._base_path, 'uploads')

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        """Repositorio de productos (singleton)."""
        if self._product_repo is None:
            self._product_repo = ProductRepository(self._base_path)
        return self._product_repo

    @property
    def order_repo(self) -> OrderRepository:
        """Repositorio de pedidos (singleton)."""
        if self._order_repo is None:
            self._order_repo = OrderRepository(self._base_path)
        return self._order_repo

    @property
    def banner_repo(self) -> BannerRepository:
        """Repositorio de banners (singleton)."""
        if self._banner_repo is None:
            self._banner_repo = BannerRepository(self._base_path)
        return self._banner_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self._base_path)
        return self._audit_repo

    @property
    def settings_repo(self) -> SettingsRepository:
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self._base_path)
        return self._settings_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def settings_service(self) -> SettingsService:
        """Servicio de configuración (singleton, carga al crearse)."""
        if self._settings_service is None:
            self._settings_service = SettingsService(self.settings_repo, self.audit_service)
            self._settings_service.load()
        return self._settings_service

    @property
    def stock_status_service(self) -> StockStatusService:
        """Servicio de estado de stock (singleton)."""
        if self._stock_status_service is None:
            self._stock_status_service = StockStatusService(
                self.product_repo,
                self.settings_service.get_low_stock_threshold
            )
        return self._stock_status_service

    @property
    def product_service(self) -> ProductService:
        """Servicio de productos (singleton)."""
        if self._product_service is None:
            self._product_service = ProductService(
                self.product_repo,
                self.order_repo,
                self.audit_service
            )
        return self._product_service

    @property
    def order_service(self) -> OrderService:
        """Servicio de pedidos (singleton)."""
        if self._order_service is None:
            self._order_service = OrderService(
                self.order_repo,
                self.product_repo,
                self.audit_service
            )
        return self._order_service

    @property
    def banner_service(self) -> BannerService:
        """Servicio de banners (singleton)."""
        if self._banner_service is None:
            self._banner_service = BannerService(
                self.banner_repo,
                self.settings_service.get_banner_activation_mode,
                self.audit_service
            )
        return self._banner_service

    @property
    def catalog_query_service(self) -> CatalogQueryService:
        """Servicio de consulta del catálogo (singleton)."""
        if self._catalog_query_service is None:
            self._catalog_query_service = CatalogQueryService(self.product_repo)
        return self._catalog_query_service

    @property
    def access_service(self) -> AccessService:
        """Servicio de acceso (singleton)."""
        if self._access_service is None:
            self._access_service = AccessService(self._identity_provider)
        return self._access_service

    @property
    def image_uploader(self) -> LocalImageUploader:
        """Almacén de imágenes (singleton)."""
        if self._image_uploader is None:
            self._image_uploader = LocalImageUploader(self.upload_dir)
        return self._image_uploader

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Olvida repositorios y servicios; se reconstruyen al pedirlos."""
        self._product_repo = None
        self._order_repo = None
        self._banner_repo = None
        self._audit_repo = None
        self._settings_repo = None

        self._audit_service = None
        self._settings_service = None
        self._stock_status_service = None
        self._product_service = None
        self._order_service = None
        self._banner_service = None
        self._catalog_query_service = None
        self._access_service = None
        self._image_uploader = None

    @classmethod
    def get_instance(cls, base_path: str = None, identity_provider=None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            base_path: Directorio de datos (solo se usa en primera llamada)
            identity_provider: Proveedor de identidad (solo en primera llamada)

        Returns:
            Instancia del contenedor
        """
        if cls._instance is None:
            return cls(base_path, identity_provider)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(base_path: str = None, identity_provider=None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        base_path: Directorio de datos
        identity_provider: Proveedor de identidad

    Returns:
        Instancia del contenedor
    """
    return AppContainer.get_instance(base_path, identity_provider)
