import csv
import io
from datetime import date

import pytest

from catalog_admin.errors import ValidationError
from catalog_admin.models import Product
from catalog_admin.services.catalog_query_service import (
    CatalogQueryService,
    export_filename,
    export_products_csv,
    filter_products,
)


@pytest.fixture
def catalog():
    return [
        Product(id='1', name='Power Bank X', sku='PB-100', status='Active', price=49.9, stock=12),
        Product(id='2', name='Old Charger', sku='CH-1', status='Archived', price=10, stock=0),
        Product(id='3', name='Flash 64GB', sku=None, status='Draft', price=8.5, stock=3),
    ]


def test_all_hides_archived(catalog):
    assert [p.id for p in filter_products(catalog, status='All')] == ['1', '3']


def test_concrete_status_is_exact(catalog):
    assert [p.id for p in filter_products(catalog, status='Archived')] == ['2']
    assert [p.id for p in filter_products(catalog, status='Draft')] == ['3']
    assert filter_products(catalog, status='Low Stock') == []


def test_missing_status_means_all(catalog):
    assert [p.id for p in filter_products(catalog, status=None)] == ['1', '3']


def test_unknown_status_filter(catalog):
    with pytest.raises(ValidationError):
        filter_products(catalog, status='archived')


@pytest.mark.parametrize('search,expected', [
    ('pb-100', ['1']),
    ('power', ['1']),
    ('POWER BANK', ['1']),
    ('zzz', []),
    ('flash', ['3']),
    ('', ['1', '3']),
])
def test_search_by_name_or_sku(catalog, search, expected):
    assert [p.id for p in filter_products(catalog, search=search)] == expected


def test_search_and_status_combine(catalog):
    assert filter_products(catalog, search='charger', status='All') == []
    assert [p.id for p in filter_products(catalog, search='charger', status='Archived')] == ['2']


def test_export_rows_match_filtered_view(catalog):
    visible = filter_products(catalog, status='All')

    text = export_products_csv(visible)
    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == ['Name', 'SKU', 'Category', 'Price', 'Stock', 'Status']
    assert len(rows) - 1 == len(visible) == 2


def test_export_doubles_embedded_quotes():
    product = Product(id='q', name='Cargador "Turbo" 65W', sku='LC-65', price=30, stock=2)

    text = export_products_csv([product])

    assert '"Cargador ""Turbo"" 65W"' in text
    assert text.splitlines()[1].split(',')[3:5] == ['30', '2']
    assert list(csv.reader(io.StringIO(text)))[1][0] == 'Cargador "Turbo" 65W'


def test_export_empty_sku_and_line_endings():
    text = export_products_csv([Product(id='n', name='Sin SKU', price=1.5)])

    assert '\r' not in text
    assert text.endswith('\n')
    assert text.splitlines()[1] == '"Sin SKU","","Power Banks",1.5,0,"Active"'


def test_export_filename():
    assert export_filename(date(2025, 3, 9)) == 'inventory_export_2025-03-09.csv'


def test_query_service_reads_store(product_repo, catalog):
    for product in catalog:
        product_repo.create_product(product)
    service = CatalogQueryService(product_repo)

    assert {p.id for p in service.search(status='All')} == {'1', '3'}
    assert service.export(search='pb').count('\n') == 2
