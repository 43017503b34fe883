# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Encapsula todo el acceso a orders.json
# Los pedidos se almacenan como lista con sus ítems anidados.
# ==============================================================================

import os
import uuid
from typing import List, Optional

from catalog_admin.models import Order
from catalog_admin.repositories.base import ListRepository


class OrderRepository(ListRepository):
    """
    Repositorio para gestión de pedidos.

    Formato de datos en orders.json:
    [
        {
            "id": "a91f...",
            "user_id": "u-123",
            "total_amount": 99.8,
            "status": "PENDING",
            "items": [
                {"id": "...", "product_id": "5b0e...", "quantity": 2, "price_at_purchase": 49.9}
            ],
            ...
        }
    ]
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de pedidos.

        Args:
            base_path: Directorio de datos
        """
        file_path = os.path.join(base_path, 'orders.json')
        super().__init__(file_path)

    def next_id(self) -> str:
        """Genera un ID opaco para un pedido o ítem nuevo."""
        return uuid.uuid4().hex

    def list_orders(self) -> List[Order]:
        """
        Obtiene todos los pedidos, más recientes primero.

        Returns:
            Lista de pedidos
        """
        orders = [Order.from_dict(o) for o in self.get_all()]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders

    def get_order(self, order_id: str) -> Optional[Order]:
        """
        Obtiene un pedido por su ID.

        Returns:
            Pedido o None si no existe
        """
        data = self.find_by('id', order_id)
        if data is None:
            return None
        return Order.from_dict(data)

    def create_order(self, order: Order) -> Order:
        """Agrega un pedido nuevo."""
        self.append(order.to_dict())
        return order

    def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        """
        Cambia el estado de un pedido.

        Returns:
            Pedido actualizado o None si no existe
        """
        if not self.update_where('id', order_id, {'status': status}):
            return None
        return self.get_order(order_id)

    def delete_order(self, order_id: str) -> Optional[Order]:
        """
        Elimina un pedido con todos sus ítems.

        Returns:
            Pedido eliminado o None
        """
        removed = self.delete_where('id', order_id)
        if removed is None:
            return None
        return Order.from_dict(removed)

    def find_orders_referencing(self, product_id: str) -> List[str]:
        """
        Busca pedidos con algún ítem que cite el producto.

        Args:
            product_id: ID del producto

        Returns:
            IDs de los pedidos que lo referencian
        """
        return [order.id for order in self.list_orders() if order.references_product(product_id)]
