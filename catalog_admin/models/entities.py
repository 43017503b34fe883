# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del catálogo administrado.
# Diseñadas para ser independientes del mecanismo de persistencia.
# Las referencias entre entidades son IDs planos (referencias débiles):
# un producto puede archivarse o borrarse sin romper el pedido que lo cita.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Timestamp ISO en UTC, formato usado por todas las entidades."""
    return datetime.now(timezone.utc).isoformat()


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class ProductStatus(str, Enum):
    """
    Estado del producto fijado por el operador.
    NO se deriva del stock aunque existan los valores "Out of Stock" y "Low Stock".
    """
    DRAFT = "Draft"
    ACTIVE = "Active"
    ARCHIVED = "Archived"
    OUT_OF_STOCK = "Out of Stock"
    LOW_STOCK = "Low Stock"


class StockStatus(str, Enum):
    """Categoría de stock calculada al leer (nunca persistida)."""
    OUT_OF_STOCK = "Out of Stock"
    LOW_STOCK = "Low Stock"
    IN_STOCK = "In Stock"


class ProductCategory(str, Enum):
    """Categorías fijas del catálogo."""
    POWER_BANKS = "Power Banks"
    FLASH = "Flash"
    CHARGER_CABLE = "Charger & Cable"
    DIVIDERS = "Dividers"
    LAPTOP_CHARGERS = "Laptop Chargers"
    MOBILE_BATTERIES = "Mobile batteries"


class OrderStatus(str, Enum):
    """Estados posibles de un pedido (máquina permisiva)."""
    PENDING = "PENDING"          # Inicial, lo fija la tienda al crear
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"      # Terminal por convención
    CANCELLED = "CANCELLED"      # Terminal por convención


# Máximo de imágenes por producto (la primera es la miniatura)
MAX_PRODUCT_IMAGES = 4


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador opaco asignado por el almacenamiento
        name: Nombre (no vacío)
        brand: Marca
        price: Precio de venta (>= 0)
        original_price: Precio de comparación (opcional, >= 0)
        stock: Unidades en inventario (>= 0)
        sku: Código SKU (opcional, no único)
        category: Categoría del conjunto fijo
        status: Estado fijado por el operador
        image_url: Imagen principal
        images: Hasta 4 URLs, la primera es la miniatura
        rating: Valoración promedio
        review_count: Cantidad de reseñas
        description: Descripción libre
        created_at: Timestamp de creación
    """
    id: str
    name: str
    brand: str = ''
    price: float = 0.0
    original_price: Optional[float] = None
    stock: int = 0
    sku: Optional[str] = None
    category: str = ProductCategory.POWER_BANKS.value
    status: str = ProductStatus.ACTIVE.value
    image_url: str = ''
    images: List[str] = field(default_factory=list)
    rating: float = 0.0
    review_count: int = 0
    description: str = ''
    created_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = utc_now_iso()

    @property
    def is_archived(self) -> bool:
        return self.status == ProductStatus.ARCHIVED.value

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'name': self.name,
            'brand': self.brand,
            'price': self.price,
            'original_price': self.original_price,
            'stock': self.stock,
            'sku': self.sku,
            'category': self.category,
            'status': self.status,
            'image_url': self.image_url,
            'images': list(self.images),
            'rating': self.rating,
            'review_count': self.review_count,
            'description': self.description,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, pid: str, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario (formato JSON actual)."""
        return cls(
            id=pid,
            name=data.get('name', ''),
            brand=data.get('brand', ''),
            price=data.get('price', 0.0),
            original_price=data.get('original_price'),
            stock=data.get('stock') or 0,
            sku=data.get('sku'),
            category=data.get('category', ProductCategory.POWER_BANKS.value),
            status=data.get('status', ProductStatus.ACTIVE.value),
            image_url=data.get('image_url', ''),
            images=list(data.get('images') or []),
            rating=data.get('rating', 0.0),
            review_count=data.get('review_count', 0),
            description=data.get('description', ''),
            created_at=data.get('created_at', '')
        )


@dataclass
class Banner:
    """
    Banner promocional de la pantalla principal de la tienda.

    Attributes:
        id: Identificador opaco
        title: Título (requerido)
        subtitle: Subtítulo
        discount_text: Texto de descuento ("-20%")
        image_url: Imagen del banner
        product_id: Producto enlazado (referencia débil, solo navegación)
        active: Si se muestra a los clientes
        created_at: Timestamp de creación
    """
    id: str
    title: str
    subtitle: str = ''
    discount_text: str = ''
    image_url: str = ''
    product_id: Optional[str] = None
    active: bool = False
    created_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'subtitle': self.subtitle,
            'discount_text': self.discount_text,
            'image_url': self.image_url,
            'product_id': self.product_id,
            'active': self.active,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, bid: str, data: Dict[str, Any]) -> 'Banner':
        return cls(
            id=bid,
            title=data.get('title', ''),
            subtitle=data.get('subtitle', ''),
            discount_text=data.get('discount_text', ''),
            image_url=data.get('image_url', ''),
            product_id=data.get('product_id'),
            active=bool(data.get('active', False)),
            created_at=data.get('created_at', '')
        )


# ==============================================================================
# ENTIDADES DE PEDIDOS
# ==============================================================================

@dataclass
class OrderItem:
    """
    Ítem individual dentro de un pedido.

    Attributes:
        id: Identificador del ítem
        product_id: Producto comprado (referencia débil)
        quantity: Cantidad (>= 1)
        price_at_purchase: Precio congelado al momento de la compra
    """
    id: str
    product_id: str
    quantity: int = 1
    price_at_purchase: float = 0.0

    @property
    def line_total(self) -> float:
        """Total de la línea (quantity * price_at_purchase)."""
        return round(self.quantity * self.price_at_purchase, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'price_at_purchase': self.price_at_purchase,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderItem':
        return cls(
            id=data.get('id', ''),
            product_id=data.get('product_id', ''),
            quantity=data.get('quantity', 1),
            price_at_purchase=data.get('price_at_purchase', 0.0)
        )


@dataclass
class Order:
    """
    Pedido creado por la tienda externa.

    Attributes:
        id: Identificador opaco
        user_id: Principal que compró (ID opaco)
        total_amount: Total congelado al crear, nunca se recalcula
        status: Estado actual
        shipping_address: Dirección de envío (texto libre)
        payment_method: Método de pago (texto libre)
        receipt_url: Comprobante (opcional)
        created_at: Timestamp de creación (inmutable)
        items: Ítems del pedido
    """
    id: str
    user_id: str
    total_amount: float = 0.0
    status: str = OrderStatus.PENDING.value
    shipping_address: str = ''
    payment_method: str = ''
    receipt_url: Optional[str] = None
    created_at: str = ''
    items: List[OrderItem] = field(default_factory=list)

    def __post_init__(self):
        if not self.created_at:
            self.created_at = utc_now_iso()

    def references_product(self, product_id: str) -> bool:
        """Verifica si algún ítem cita el producto."""
        return any(item.product_id == product_id for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'total_amount': self.total_amount,
            'status': self.status,
            'shipping_address': self.shipping_address,
            'payment_method': self.payment_method,
            'receipt_url': self.receipt_url,
            'created_at': self.created_at,
            'items': [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        """Crea instancia desde diccionario (formato JSON actual)."""
        items = [OrderItem.from_dict(i) for i in data.get('items', [])]
        return cls(
            id=data.get('id', ''),
            user_id=data.get('user_id', ''),
            total_amount=data.get('total_amount', 0.0),
            status=data.get('status', OrderStatus.PENDING.value),
            shipping_address=data.get('shipping_address', ''),
            payment_method=data.get('payment_method', ''),
            receipt_url=data.get('receipt_url'),
            created_at=data.get('created_at', ''),
            items=items
        )


# ==============================================================================
# IDENTIDAD
# ==============================================================================

@dataclass(frozen=True)
class Principal:
    """
    Identidad entregada por el proveedor externo.
    No se persiste aquí; el rol se recalcula en cada carga de sesión.

    Attributes:
        email: Correo del usuario autenticado
        role_claim: Rol declarado en los metadatos (ej: "admin")
    """
    email: Optional[str] = None
    role_claim: Optional[str] = None
