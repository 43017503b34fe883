import pytest

from catalog_admin.errors import ValidationError
from catalog_admin.models import Product, ProductStatus, StockStatus
from catalog_admin.services.stock_status_service import (
    StockStatusService,
    compute_dashboard_stats,
    derive_stock_status,
)


@pytest.mark.parametrize('stock,threshold,expected', [
    (0, 10, StockStatus.OUT_OF_STOCK),
    (1, 10, StockStatus.LOW_STOCK),
    (9, 10, StockStatus.LOW_STOCK),
    (10, 10, StockStatus.IN_STOCK),
    (250, 10, StockStatus.IN_STOCK),
    (0, 1, StockStatus.OUT_OF_STOCK),
    (1, 1, StockStatus.IN_STOCK),
    (4, 5, StockStatus.LOW_STOCK),
])
def test_derive_stock_status_boundaries(stock, threshold, expected):
    assert derive_stock_status(stock, threshold) == expected


def test_derive_stock_status_is_pure():
    first = [derive_stock_status(s, 7) for s in range(20)]
    second = [derive_stock_status(s, 7) for s in range(20)]
    assert first == second


def test_derive_stock_status_default_threshold():
    assert derive_stock_status(9) == StockStatus.LOW_STOCK
    assert derive_stock_status(10) == StockStatus.IN_STOCK


def test_derive_stock_status_rejects_invalid_inputs():
    with pytest.raises(ValidationError):
        derive_stock_status(-1, 10)
    with pytest.raises(ValidationError):
        derive_stock_status(5, 0)


def test_dashboard_stats_sums():
    products = [
        Product(id='a', name='A', price=10.0, stock=3),
        Product(id='b', name='B', price=2.5, stock=20),
        Product(id='c', name='C', price=99.99, stock=0),
    ]
    stats = compute_dashboard_stats(products, 10)
    assert stats['product_count'] == 3
    assert stats['total_value'] == pytest.approx(10.0 * 3 + 2.5 * 20)
    assert stats['total_stock'] == 23
    # agotados cuentan como stock bajo
    assert stats['low_stock_count'] == 2


def test_dashboard_stats_empty_set():
    stats = compute_dashboard_stats([], 10)
    assert stats == {
        'product_count': 0,
        'low_stock_count': 0,
        'total_value': 0,
        'total_stock': 0,
    }


def test_annotate_keeps_stored_status(product_repo):
    product_repo.create_product(Product(id='p1', name='Draft one', stock=0, status=ProductStatus.DRAFT.value))
    service = StockStatusService(product_repo, lambda: 10)

    annotated = service.annotate(product_repo.list_products())

    assert annotated[0]['status'] == 'Draft'
    assert annotated[0]['stock_status'] == 'Out of Stock'
    # el status guardado no cambia
    assert product_repo.get_product('p1').status == 'Draft'


def test_dashboard_uses_configured_threshold(product_repo):
    product_repo.create_product(Product(id='p1', name='X', price=1.0, stock=4))
    product_repo.create_product(Product(id='p2', name='Y', price=1.0, stock=6))
    service = StockStatusService(product_repo, lambda: 5)

    stats = service.get_dashboard_stats()

    assert stats['low_stock_threshold'] == 5
    assert stats['low_stock_count'] == 1
    by_id = {p['id']: p['stock_status'] for p in service.annotate(product_repo.list_products())}
    assert by_id == {'p1': 'Low Stock', 'p2': 'In Stock'}
