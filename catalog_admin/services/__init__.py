# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio del panel.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (controllers) solo llaman a servicios
# 4. Los servicios NO conocen el tipo de almacenamiento (JSON/SQL)
#
# ESTRUCTURA:
# ├── product_service.py        → Alta, edición, archivado y borrado de productos
# ├── order_service.py          → Pedidos y su máquina de estados permisiva
# ├── banner_service.py         → Banners y política de activación
# ├── stock_status_service.py   → Estado de stock derivado y agregados del panel
# ├── catalog_query_service.py  → Filtro, búsqueda y exportación CSV
# ├── access_service.py         → Resolución de rol administrador
# ├── settings_service.py       → Configuración (umbral, tema, modo de banners)
# ├── upload_service.py         → Subida de imágenes
# └── audit_service.py          → Logs de actividad
#
# ERRORES:
# Los servicios lanzan errores de catalog_admin.errors y NO los silencian;
# la capa HTTP los traduce a códigos de respuesta.
# ==============================================================================

from catalog_admin.errors import (
    CatalogError,
    NotFoundError,
    ReferentialConflictError,
    ValidationError,
    UploadError,
    TransientStoreError,
)
from catalog_admin.services.audit_service import AuditService
from catalog_admin.services.stock_status_service import (
    StockStatusService,
    derive_stock_status,
    compute_dashboard_stats,
    DEFAULT_LOW_STOCK_THRESHOLD,
)
from catalog_admin.services.settings_service import SettingsService, AppSettings
from catalog_admin.services.product_service import ProductService
from catalog_admin.services.order_service import OrderService
from catalog_admin.services.banner_service import BannerService, BannerActivationPolicy
from catalog_admin.services.catalog_query_service import (
    CatalogQueryService,
    filter_products,
    export_products_csv,
)
from catalog_admin.services.access_service import AccessService, is_admin
from catalog_admin.services.upload_service import LocalImageUploader

__all__ = [
    # Errores
    'CatalogError',
    'NotFoundError',
    'ReferentialConflictError',
    'ValidationError',
    'UploadError',
    'TransientStoreError',

    # Servicios
    'AuditService',
    'StockStatusService',
    'SettingsService',
    'AppSettings',
    'ProductService',
    'OrderService',
    'BannerService',
    'BannerActivationPolicy',
    'CatalogQueryService',
    'AccessService',
    'LocalImageUploader',

    # Funciones puras
    'derive_stock_status',
    'compute_dashboard_stats',
    'filter_products',
    'export_products_csv',
    'is_admin',
    'DEFAULT_LOW_STOCK_THRESHOLD',
]
