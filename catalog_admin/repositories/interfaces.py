# ==============================================================================
# INTERFACES DE REPOSITORIOS Y COLABORADORES EXTERNOS
# ==============================================================================
#
# Este archivo define los contratos (protocolos) que los servicios consumen.
# Esto permite:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de interfaces, NO de implementaciones concretas
#    - Cambiar JSON → base de datos solo requiere nueva implementación
#
# 2. TESTING
#    - Fácil crear dobles que implementen estas interfaces
#
# 3. COLABORADORES EXTERNOS
#    - Subida de imágenes y proveedor de identidad quedan fuera del núcleo;
#      aquí solo se define su frontera.
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from catalog_admin.models import Banner, Order, Principal, Product


# ==============================================================================
# INTERFAZ BASE
# ==============================================================================

@runtime_checkable
class IRepository(Protocol):
    """Operaciones mínimas que cualquier repositorio debe soportar."""

    def reload(self) -> None:
        """Recarga datos desde el almacenamiento."""
        ...


# ==============================================================================
# ALMACÉN DE ENTIDADES
# ==============================================================================

@runtime_checkable
class IProductRepository(IRepository, Protocol):
    """Almacén de productos. Retorna None cuando el ID no existe."""

    def list_products(self) -> List[Product]:
        ...

    def get_product(self, product_id: str) -> Optional[Product]:
        ...

    def create_product(self, product: Product) -> Product:
        ...

    def update_product(self, product: Product) -> Optional[Product]:
        ...

    def delete_product(self, product_id: str) -> Optional[Product]:
        ...

    def next_id(self) -> str:
        ...


@runtime_checkable
class IOrderRepository(IRepository, Protocol):
    """Almacén de pedidos con sus ítems anidados."""

    def list_orders(self) -> List[Order]:
        ...

    def get_order(self, order_id: str) -> Optional[Order]:
        ...

    def create_order(self, order: Order) -> Order:
        ...

    def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        ...

    def delete_order(self, order_id: str) -> Optional[Order]:
        ...

    def find_orders_referencing(self, product_id: str) -> List[str]:
        ...

    def next_id(self) -> str:
        ...


@runtime_checkable
class IBannerRepository(IRepository, Protocol):
    """Almacén de banners promocionales."""

    def list_banners(self) -> List[Banner]:
        ...

    def get_banner(self, banner_id: str) -> Optional[Banner]:
        ...

    def create_banner(self, banner: Banner) -> Banner:
        ...

    def update_banner(self, banner: Banner) -> Optional[Banner]:
        ...

    def set_active_flags(self, flags: Dict[str, bool]) -> None:
        ...

    def delete_banner(self, banner_id: str) -> Optional[Banner]:
        ...

    def next_id(self) -> str:
        ...


@runtime_checkable
class ISettingsRepository(IRepository, Protocol):
    """Configuraciones con nombre (umbral de stock, tema, modo de banners)."""

    def load(self) -> Dict[str, Any]:
        ...

    def save_settings(self, values: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class IAuditRepository(IRepository, Protocol):
    """Registro de auditoría."""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        ...

    def search_logs(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        ...


# ==============================================================================
# COLABORADORES EXTERNOS
# ==============================================================================

@runtime_checkable
class IImageUploader(Protocol):
    """
    Subida de imágenes.
    Lanza UploadError si la transferencia falla.
    """

    def upload(self, data: bytes, suggested_name: str) -> str:
        """Sube los bytes y retorna la URL pública."""
        ...


@runtime_checkable
class IIdentityProvider(Protocol):
    """
    Proveedor de identidad externo.
    El núcleo nunca verifica credenciales; solo consume el principal actual.
    """

    def get_current_principal(self) -> Optional[Principal]:
        """Retorna el principal autenticado o None si es anónimo."""
        ...
