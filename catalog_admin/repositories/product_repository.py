# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Encapsula todo el acceso a products.json
# Los productos se almacenan como diccionario: {product_id: {datos_producto}}
# ==============================================================================

import os
import uuid
from typing import Any, Dict, List, Optional

from catalog_admin.models import Product
from catalog_admin.repositories.base import DictRepository


class ProductRepository(DictRepository):
    """
    Repositorio para gestión de productos del catálogo.

    Formato de datos en products.json:
    {
        "5b0e2c...": {
            "name": "Power Bank X",
            "sku": "PB-100",
            "price": 49.9,
            "stock": 12,
            ...
        }
    }

    Mantiene una caché en memoria que solo se reemplaza después de que
    la escritura al archivo fue confirmada.
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de productos.

        Args:
            base_path: Directorio de datos
        """
        file_path = os.path.join(base_path, 'products.json')
        super().__init__(file_path)
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._cache_loaded = False

    def load(self) -> Dict[str, Dict[str, Any]]:
        """
        Carga todos los productos.
        Usa caché para evitar lecturas repetidas.

        Returns:
            Diccionario {product_id: datos}
        """
        if not self._cache_loaded:
            self._cache = self.get_all()
            self._cache_loaded = True
        return self._cache

    def save(self, products: Dict[str, Dict[str, Any]]) -> None:
        """
        Guarda todos los productos.
        La caché se actualiza solo si la escritura tuvo éxito.
        """
        self._write_raw(products)
        self._cache = products
        self._cache_loaded = True

    def reload(self) -> None:
        """Fuerza recarga desde archivo ignorando caché."""
        self._cache_loaded = False
        self.load()

    def next_id(self) -> str:
        """Genera un ID opaco para un producto nuevo."""
        return uuid.uuid4().hex

    def list_products(self) -> List[Product]:
        """
        Obtiene todos los productos, más recientes primero.

        Returns:
            Lista de productos
        """
        products = [Product.from_dict(pid, data) for pid, data in self.load().items()]
        products.sort(key=lambda p: p.created_at, reverse=True)
        return products

    def get_product(self, product_id: str) -> Optional[Product]:
        """
        Obtiene un producto por su ID.

        Returns:
            Producto o None si no existe
        """
        data = self.load().get(str(product_id))
        if data is None:
            return None
        return Product.from_dict(str(product_id), data)

    def create_product(self, product: Product) -> Product:
        """
        Crea un nuevo producto.

        Args:
            product: Producto con ID ya asignado
        """
        products = dict(self.load())
        products[product.id] = product.to_dict()
        self.save(products)
        return product

    def update_product(self, product: Product) -> Optional[Product]:
        """
        Reemplaza un producto existente.

        Returns:
            Producto guardado o None si no existía
        """
        products = dict(self.load())
        if product.id not in products:
            return None
        products[product.id] = product.to_dict()
        self.save(products)
        return product

    def delete_product(self, product_id: str) -> Optional[Product]:
        """
        Elimina un producto.

        Returns:
            Producto eliminado o None
        """
        products = dict(self.load())
        removed = products.pop(str(product_id), None)
        if removed is None:
            return None
        self.save(products)
        return Product.from_dict(str(product_id), removed)
