# ==============================================================================
# SERVICIO DE PEDIDOS
# ==============================================================================
# Centraliza el ciclo de vida de un pedido.
#
# MÁQUINA DE ESTADOS PERMISIVA:
#   PENDING → PROCESSING → SHIPPED → DELIVERED,  CANCELLED desde cualquiera
# Es el flujo habitual, pero NO se valida: el operador puede mover cualquier
# estado a cualquier otro (incluso DELIVERED → PENDING). No hay transiciones
# automáticas ni efectos colaterales (ni stock, ni pagos, ni notificaciones).
#
# total_amount es una foto tomada al crear el pedido: nunca se recalcula.
# ==============================================================================

from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from catalog_admin.errors import NotFoundError, ValidationError
from catalog_admin.models import Order, OrderItem, OrderStatus
from catalog_admin.repositories.interfaces import IOrderRepository, IProductRepository
from catalog_admin.services.audit_service import AuditService
from catalog_admin.services.product_service import parse_count, parse_money


# Estados válidos de pedido
ORDER_STATUSES = frozenset(s.value for s in OrderStatus)

# Terminales por convención (no bloqueados)
TERMINAL_STATUSES = frozenset([OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value])


def search_orders(orders: Iterable[Order], query: str = '') -> List[Order]:
    """
    Búsqueda de texto libre en ID de pedido o dirección de envío
    (insensible a mayúsculas).
    """
    q = (query or '').strip().lower()
    if not q:
        return list(orders)
    return [
        o for o in orders
        if q in (o.id or '').lower() or q in (o.shipping_address or '').lower()
    ]


class OrderService:
    """
    Servicio para gestión de pedidos.

    Responsabilidades:
    - Alta de pedidos (la invoca la tienda externa)
    - Cambios de estado a pedido del operador
    - Borrado irreversible
    - Vistas de lectura (detalle enriquecido, clientes, conteo por estado)
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        product_repo: IProductRepository,
        audit_service: AuditService = None
    ):
        """
        Args:
            order_repo: Repositorio de pedidos
            product_repo: Repositorio de productos (solo lectura, para enriquecer)
            audit_service: Servicio de auditoría (opcional)
        """
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.audit_service = audit_service

    # =========================================================================
    # CREACIÓN DE PEDIDOS
    # =========================================================================

    def create_order(
        self,
        user_id: str,
        items: List[Dict[str, Any]],
        shipping_address: str = '',
        payment_method: str = '',
        total_amount: Any = None,
        receipt_url: Optional[str] = None
    ) -> Order:
        """
        Registra un pedido nuevo en estado PENDING.

        Args:
            user_id: Principal comprador
            items: [{"product_id", "quantity", "price_at_purchase"}]
            total_amount: Total congelado; si falta se calcula una única vez
                          desde los ítems

        Raises:
            ValidationError: Si falta el comprador o algún ítem es inválido
        """
        if not user_id:
            raise ValidationError('user_id', 'es requerido')

        if items is None:
            items = []
        if not isinstance(items, (list, tuple)):
            raise ValidationError('items', 'debe ser una lista')

        order_items = []
        for raw in items:
            if not isinstance(raw, Mapping):
                raise ValidationError('items', 'cada ítem debe ser un objeto')
            product_id = raw.get('product_id')
            if not product_id:
                raise ValidationError('items.product_id', 'es requerido')
            quantity = parse_count('items.quantity', raw.get('quantity'), default=1)
            if quantity < 1:
                raise ValidationError('items.quantity', 'debe ser al menos 1')
            price = parse_money('items.price_at_purchase', raw.get('price_at_purchase'), required=True)
            order_items.append(OrderItem(
                id=self.order_repo.next_id(),
                product_id=str(product_id),
                quantity=quantity,
                price_at_purchase=price
            ))

        total = parse_money('total_amount', total_amount)
        if total is None:
            total = round(sum(item.line_total for item in order_items), 2)

        order = Order(
            id=self.order_repo.next_id(),
            user_id=str(user_id),
            total_amount=total,
            status=OrderStatus.PENDING.value,
            shipping_address=str(shipping_address or ''),
            payment_method=str(payment_method or ''),
            receipt_url=receipt_url or None,
            items=order_items
        )
        return self.order_repo.create_order(order)

    # =========================================================================
    # CONSULTA DE PEDIDOS
    # =========================================================================

    def list_orders(self, query: str = '') -> List[Order]:
        """Pedidos más recientes primero, opcionalmente filtrados."""
        return search_orders(self.order_repo.list_orders(), query)

    def get_order(self, order_id: str) -> Order:
        """
        Raises:
            NotFoundError: Si el pedido no existe
        """
        order = self.order_repo.get_order(order_id)
        if order is None:
            raise NotFoundError('Pedido', order_id)
        return order

    def get_order_detail(self, order_id: str) -> Dict[str, Any]:
        """
        Pedido con cada ítem enriquecido por su producto actual.

        El producto se busca al leer; si ya no existe, "product" es None
        y el ítem conserva su precio histórico intacto.
        """
        order = self.get_order(order_id)
        data = order.to_dict()
        cache: Dict[str, Any] = {}
        for item_data, item in zip(data['items'], order.items):
            if item.product_id not in cache:
                product = self.product_repo.get_product(item.product_id)
                cache[item.product_id] = product.to_dict() if product else None
            item_data['product'] = cache[item.product_id]
            item_data['line_total'] = item.line_total
        data['is_terminal'] = order.status in TERMINAL_STATUSES
        return data

    def summarize_customers(self) -> List[Dict[str, Any]]:
        """
        Clientes que aparecen en pedidos, con su cantidad de pedidos.
        Ordenados por su pedido más reciente.
        """
        summary: Dict[str, Dict[str, Any]] = {}
        for order in self.order_repo.list_orders():
            entry = summary.setdefault(order.user_id, {
                'user_id': order.user_id,
                'orders': 0,
                'last_order_at': order.created_at,
            })
            entry['orders'] += 1
        return list(summary.values())

    def orders_by_status(self) -> Dict[str, int]:
        """Conteo de pedidos por estado (todos los estados presentes)."""
        counts = Counter(o.status for o in self.order_repo.list_orders())
        return {status.value: counts.get(status.value, 0) for status in OrderStatus}

    # =========================================================================
    # CAMBIO DE ESTADO
    # =========================================================================

    def change_status(self, order_id: str, new_status: str, user: str = None) -> Order:
        """
        Cambia el estado de un pedido. Cualquier estado es alcanzable
        desde cualquier otro; reaplicar el mismo estado no escribe nada.

        Raises:
            ValidationError: Si el estado no es uno de OrderStatus
            NotFoundError: Si el pedido no existe
        """
        if not isinstance(new_status, str):
            raise ValidationError('status', f'Estado inválido: {new_status!r}')
        new_status = new_status.strip().upper()
        if new_status not in ORDER_STATUSES:
            raise ValidationError('status', f'Estado inválido: {new_status}')

        order = self.get_order(order_id)
        old_status = order.status
        if old_status == new_status:
            return order

        updated = self.order_repo.update_order_status(order_id, new_status)
        if updated is None:
            raise NotFoundError('Pedido', order_id)

        if self.audit_service and user:
            self.audit_service.log_order_status_change(user, order_id, old_status, new_status)
        return updated

    # =========================================================================
    # BORRADO
    # =========================================================================

    def delete_order(self, order_id: str, user: str = None) -> Order:
        """
        Borrado irreversible del pedido y sus ítems, desde cualquier estado.

        Raises:
            NotFoundError: Si el pedido no existe
        """
        removed = self.order_repo.delete_order(order_id)
        if removed is None:
            raise NotFoundError('Pedido', order_id)

        if self.audit_service and user:
            self.audit_service.log_order_deleted(user, order_id, removed.status)
        return removed
