# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (archivos JSON).
# Es el "almacén de entidades": dueño de la existencia de cada registro.
#
# ESTRUCTURA:
# ├── interfaces.py            → Protocolos (almacén, subida de imágenes, identidad)
# ├── base.py                  → Clases base JSON (DictRepository, ListRepository)
# ├── product_repository.py    → Acceso a products.json
# ├── order_repository.py      → Acceso a orders.json
# ├── banner_repository.py     → Acceso a banners.json
# ├── audit_repository.py      → Acceso a audit.json
# └── settings_repository.py   → Acceso a settings.json
#
# Los services NO conocen el formato de archivo (dependen de interfaces).
# ==============================================================================

# Interfaces
from .interfaces import (
    IRepository,
    IProductRepository,
    IOrderRepository,
    IBannerRepository,
    ISettingsRepository,
    IAuditRepository,
    IImageUploader,
    IIdentityProvider,
)

# Implementaciones concretas (JSON)
from .base import BaseRepository, DictRepository, ListRepository
from .product_repository import ProductRepository
from .order_repository import OrderRepository
from .banner_repository import BannerRepository
from .audit_repository import AuditRepository
from .settings_repository import SettingsRepository

__all__ = [
    # Interfaces
    'IRepository',
    'IProductRepository',
    'IOrderRepository',
    'IBannerRepository',
    'ISettingsRepository',
    'IAuditRepository',
    'IImageUploader',
    'IIdentityProvider',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'ListRepository',

    # Implementaciones JSON
    'ProductRepository',
    'OrderRepository',
    'BannerRepository',
    'AuditRepository',
    'SettingsRepository',
]
