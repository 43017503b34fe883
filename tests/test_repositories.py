import json
import os

import pytest

from catalog_admin.errors import TransientStoreError
from catalog_admin.models import Banner, Order, OrderItem, Product
from catalog_admin.repositories import (
    BannerRepository,
    IBannerRepository,
    IOrderRepository,
    IProductRepository,
    OrderRepository,
    ProductRepository,
)


def test_repositories_satisfy_interfaces(product_repo, order_repo, banner_repo):
    assert isinstance(product_repo, IProductRepository)
    assert isinstance(order_repo, IOrderRepository)
    assert isinstance(banner_repo, IBannerRepository)


def test_files_created_empty(data_dir, product_repo, order_repo):
    with open(os.path.join(data_dir, 'products.json'), encoding='utf-8') as f:
        assert json.load(f) == {}
    with open(os.path.join(data_dir, 'orders.json'), encoding='utf-8') as f:
        assert json.load(f) == []


def test_product_round_trip_through_file(data_dir, product_repo):
    product_repo.create_product(Product(id='p1', name='Ñandú 10000mAh', price=19.99, stock=4,
                                        images=['a.png']))

    fresh = ProductRepository(data_dir)

    stored = fresh.get_product('p1')
    assert stored.name == 'Ñandú 10000mAh'
    assert stored.images == ['a.png']


def test_failed_write_keeps_last_confirmed_state(product_repo, monkeypatch):
    product_repo.create_product(Product(id='p1', name='Original', price=1, stock=5))

    def fail(*args, **kwargs):
        raise OSError('sin espacio')

    monkeypatch.setattr(os, 'replace', fail)

    with pytest.raises(TransientStoreError):
        product_repo.update_product(Product(id='p1', name='Cambiado', price=1, stock=0))

    assert product_repo.get_product('p1').name == 'Original'
    product_repo.reload()
    assert product_repo.get_product('p1').name == 'Original'


def test_corrupt_file_reads_as_empty(data_dir):
    with open(os.path.join(data_dir, 'banners.json'), 'w', encoding='utf-8') as f:
        f.write('{no es json')

    assert BannerRepository(data_dir).list_banners() == []


def test_find_orders_referencing(order_repo):
    order_repo.create_order(Order(id='o1', user_id='u', items=[OrderItem(id='i1', product_id='p1'),
                                                               OrderItem(id='i2', product_id='p1')]))
    order_repo.create_order(Order(id='o2', user_id='u', items=[OrderItem(id='i3', product_id='p2')]))

    assert order_repo.find_orders_referencing('p1') == ['o1']
    assert order_repo.find_orders_referencing('p3') == []


def test_order_status_update_and_delete(data_dir, order_repo):
    order_repo.create_order(Order(id='o1', user_id='u', total_amount=9.5))

    assert order_repo.update_order_status('o1', 'SHIPPED').status == 'SHIPPED'
    assert order_repo.update_order_status('missing', 'SHIPPED') is None

    removed = order_repo.delete_order('o1')
    assert removed.total_amount == 9.5
    assert OrderRepository(data_dir).get_order('o1') is None


def test_set_active_flags_ignores_unknown_ids(banner_repo):
    banner_repo.create_banner(Banner(id='b1', title='A', active=True))
    banner_repo.create_banner(Banner(id='b2', title='B'))

    banner_repo.set_active_flags({'b1': False, 'b2': True, 'ghost': True})

    assert banner_repo.get_banner('b1').active is False
    assert banner_repo.get_banner('b2').active is True
    assert banner_repo.get_banner('ghost') is None


def test_audit_search(audit_repo):
    audit_repo.log('PEDIDO', 'ops@tmax.com', 'Pedido abc cancelado', 'abc')
    audit_repo.log('PRODUCTO', 'otro@tmax.com', 'Producto creado', 'p9')

    assert [log['related_id'] for log in audit_repo.search_logs('ABC')] == ['abc']
    assert len(audit_repo.search_logs('tmax')) == 2
    assert audit_repo.load()[0]['user'] == 'otro@tmax.com'


def test_audit_keeps_newest_up_to_limit(audit_repo, monkeypatch):
    monkeypatch.setattr(audit_repo, 'MAX_LOGS', 2)

    for n in range(3):
        audit_repo.log('PRODUCTO', 'ops@tmax.com', f'evento {n}', f'p{n}')

    assert [log['related_id'] for log in audit_repo.get_all()] == ['p2', 'p1']


def test_settings_saved_together(settings_repo):
    settings_repo.save_settings({'theme': 'light'})
    settings_repo.save_settings({'low_stock_threshold': 4, 'banner_activation_mode': 'advisory'})

    assert settings_repo.load() == {
        'theme': 'light',
        'low_stock_threshold': 4,
        'banner_activation_mode': 'advisory',
    }
