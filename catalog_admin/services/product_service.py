# ==============================================================================
# SERVICIO DE PRODUCTOS
# ==============================================================================
# Centraliza toda la lógica de negocio del ciclo de vida de un producto:
# creación, edición, archivado (borrado lógico) y borrado físico.
#
# REGLA DE BORRADO:
# Un producto citado por algún ítem de pedido NO se puede borrar
# (ReferentialConflictError). El operador debe archivarlo.
#
# Todas las escrituras validan el producto completo antes de tocar
# el almacén: si algo falla, el producto queda como estaba.
# ==============================================================================

import math
from typing import Any, Dict, List, Optional, Tuple

from catalog_admin.errors import NotFoundError, ReferentialConflictError, ValidationError
from catalog_admin.models import (
    MAX_PRODUCT_IMAGES,
    Product,
    ProductCategory,
    ProductStatus,
)
from catalog_admin.repositories.interfaces import IOrderRepository, IProductRepository
from catalog_admin.services.audit_service import AuditService


VALID_CATEGORIES = frozenset(c.value for c in ProductCategory)
VALID_PRODUCT_STATUSES = frozenset(s.value for s in ProductStatus)


# ==============================================================================
# NORMALIZACIÓN Y VALIDACIÓN DE CAMPOS
# ==============================================================================

def parse_money(field: str, value: Any, required: bool = False) -> Optional[float]:
    """
    Convierte un monto a float redondeado a 2 decimales.

    Raises:
        ValidationError: Si falta (y es requerido), no es numérico o es negativo
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(field, 'es requerido')
        return None
    if isinstance(value, bool):
        raise ValidationError(field, 'debe ser numérico')
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, 'debe ser numérico')
    if not math.isfinite(amount):
        raise ValidationError(field, 'debe ser numérico')
    if amount < 0:
        raise ValidationError(field, 'no puede ser negativo')
    return round(amount, 2)


def parse_count(field: str, value: Any, default: int = 0) -> int:
    """
    Convierte un conteo (stock, reseñas) a entero no negativo.

    Raises:
        ValidationError: Si no es entero o es negativo
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ValidationError(field, 'debe ser un número entero')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, 'debe ser un número entero')
    if not math.isfinite(number) or not number.is_integer():
        raise ValidationError(field, 'debe ser un número entero')
    if number < 0:
        raise ValidationError(field, 'no puede ser negativo')
    return int(number)


def normalize_images(images: Any, image_url: Any) -> Tuple[str, List[str]]:
    """
    Limpia la galería: descarta entradas vacías y exige máximo 4.
    Si no hay imagen principal se usa la primera de la galería.

    Returns:
        Tupla (image_url, images)
    """
    if images is None:
        images = []
    if not isinstance(images, (list, tuple)):
        raise ValidationError('images', 'debe ser una lista de URLs')
    cleaned = [str(img).strip() for img in images if img and str(img).strip()]
    if len(cleaned) > MAX_PRODUCT_IMAGES:
        raise ValidationError('images', f'máximo {MAX_PRODUCT_IMAGES} imágenes')

    main = str(image_url or '').strip()
    if not main and cleaned:
        main = cleaned[0]
    return main, cleaned


def build_product(product_id: str, data: Dict[str, Any], created_at: str = '') -> Product:
    """
    Construye un Product válido a partir de datos crudos.

    Raises:
        ValidationError: Al primer campo inválido
    """
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('name', 'es requerido')

    price = parse_money('price', data.get('price'), required=True)
    original_price = parse_money('original_price', data.get('original_price'))
    stock = parse_count('stock', data.get('stock'))
    review_count = parse_count('review_count', data.get('review_count'))
    rating = parse_money('rating', data.get('rating')) or 0.0

    category = data.get('category') or ProductCategory.POWER_BANKS.value
    if category not in VALID_CATEGORIES:
        raise ValidationError('category', f'categoría inválida: {category}')

    status = data.get('status') or ProductStatus.ACTIVE.value
    if status not in VALID_PRODUCT_STATUSES:
        raise ValidationError('status', f'estado inválido: {status}')

    sku = data.get('sku')
    sku = str(sku).strip() if sku is not None else ''

    image_url, images = normalize_images(data.get('images'), data.get('image_url'))

    return Product(
        id=product_id,
        name=name.strip(),
        brand=str(data.get('brand') or '').strip(),
        price=price,
        original_price=original_price,
        stock=stock,
        sku=sku or None,
        category=category,
        status=status,
        image_url=image_url,
        images=images,
        rating=rating,
        review_count=review_count,
        description=str(data.get('description') or ''),
        created_at=created_at
    )


class ProductService:
    """
    Servicio para gestión del ciclo de vida de productos.

    Responsabilidades:
    - Alta con validación
    - Edición parcial todo-o-nada
    - Archivado (borrado lógico)
    - Borrado físico con guarda referencial contra pedidos
    """

    # Campos permitidos para actualización
    EDITABLE_FIELDS = frozenset([
        'name', 'brand', 'price', 'original_price', 'stock', 'sku',
        'category', 'status', 'image_url', 'images', 'rating',
        'review_count', 'description'
    ])

    def __init__(
        self,
        product_repo: IProductRepository,
        order_repo: IOrderRepository,
        audit_service: AuditService = None
    ):
        """
        Args:
            product_repo: Repositorio de productos
            order_repo: Repositorio de pedidos (para la guarda referencial)
            audit_service: Servicio de auditoría (opcional)
        """
        self.product_repo = product_repo
        self.order_repo = order_repo
        self.audit_service = audit_service

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def list_products(self) -> List[Product]:
        return self.product_repo.list_products()

    def get_product(self, product_id: str) -> Product:
        """
        Raises:
            NotFoundError: Si el producto no existe
        """
        product = self.product_repo.get_product(product_id)
        if product is None:
            raise NotFoundError('Producto', product_id)
        return product

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def create_product(self, fields: Dict[str, Any], user: str = None) -> Product:
        """
        Crea un producto nuevo. El ID lo asigna el almacén.

        Raises:
            ValidationError: Nombre vacío, precio faltante o no numérico, etc.
        """
        product = build_product(self.product_repo.next_id(), fields)
        self.product_repo.create_product(product)

        if self.audit_service and user:
            self.audit_service.log_product_created(user, product.id, product.name)
        return product

    def update_product(
        self,
        product_id: str,
        changes: Dict[str, Any],
        user: str = None
    ) -> Product:
        """
        Edición parcial. Campos fuera de EDITABLE_FIELDS se ignoran
        (id y created_at son inmutables).

        Raises:
            NotFoundError: Si el producto no existe
            ValidationError: Si el resultado combinado no es válido
        """
        current = self.get_product(product_id)
        filtered = {k: v for k, v in changes.items() if k in self.EDITABLE_FIELDS}

        merged = current.to_dict()
        merged.update(filtered)

        # Si se quitó la imagen principal de la galería, usar la primera restante
        if 'images' in filtered and 'image_url' not in filtered:
            if current.image_url in current.images and current.image_url not in (filtered['images'] or []):
                merged['image_url'] = ''

        updated = build_product(current.id, merged, current.created_at)
        if self.product_repo.update_product(updated) is None:
            raise NotFoundError('Producto', product_id)

        if self.audit_service and user:
            diff = {
                k: v for k, v in updated.to_dict().items()
                if current.to_dict().get(k) != v
            }
            self.audit_service.log_product_updated(user, updated.id, updated.name, diff)
        return updated

    def archive_product(self, product_id: str, user: str = None) -> Product:
        """
        Borrado lógico: status = Archived.
        El producto deja de verse en el filtro "All" pero sigue existiendo.
        """
        current = self.get_product(product_id)
        if current.is_archived:
            return current
        archived = self.update_product(product_id, {'status': ProductStatus.ARCHIVED.value})
        if self.audit_service and user:
            self.audit_service.log_product_archived(user, archived.id, archived.name)
        return archived

    def delete_product(self, product_id: str, user: str = None) -> Product:
        """
        Borrado físico.

        Raises:
            NotFoundError: Si el producto no existe
            ReferentialConflictError: Si algún ítem de pedido lo referencia
        """
        product = self.get_product(product_id)

        referencing = self.order_repo.find_orders_referencing(product_id)
        if referencing:
            raise ReferentialConflictError(product_id, referencing)

        removed = self.product_repo.delete_product(product_id)
        if removed is None:
            raise NotFoundError('Producto', product_id)

        if self.audit_service and user:
            self.audit_service.log_product_deleted(user, product_id, product.name)
        return removed
