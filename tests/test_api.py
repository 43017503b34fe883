import csv
import io

import pytest

from catalog_admin.errors import ReferentialConflictError


ADMIN = {'email': 'ops@tmax.com'}
BUYER = {'email': 'cliente@gmail.com', 'role': 'customer'}


def login_as(client, principal):
    with client.session_transaction() as sess:
        sess['principal'] = principal


@pytest.fixture
def admin(client):
    login_as(client, ADMIN)
    return client


def create_product(client, **fields):
    payload = {'name': 'Power Bank X', 'sku': 'PB-100', 'price': 49.9, 'stock': 12}
    payload.update(fields)
    r = client.post('/api/products', json=payload)
    assert r.status_code == 201, r.get_json()
    return r.get_json()['product']


def test_me_anonymous_and_admin(client):
    r = client.get('/api/me')
    assert r.status_code == 200
    assert r.get_json()['is_admin'] is False
    assert r.get_json()['authenticated'] is False

    login_as(client, ADMIN)
    body = client.get('/api/me').get_json()
    assert body['is_admin'] is True
    assert body['email'] == 'ops@tmax.com'


def test_role_claim_grants_admin(client):
    login_as(client, {'email': 'jefa@gmail.com', 'user_metadata': {'role': 'admin'}})
    assert client.get('/api/products').status_code == 200


def test_anonymous_gets_401_and_buyer_403(client):
    assert client.get('/api/products').status_code == 401

    login_as(client, BUYER)
    r = client.get('/api/products')
    assert r.status_code == 403
    assert r.get_json()['success'] is False


def test_product_crud_flow(admin):
    product = create_product(admin, stock=3)
    assert product['stock_status'] == 'Low Stock'
    assert product['status'] == 'Active'

    r = admin.patch(f"/api/products/{product['id']}", json={'stock': 0})
    assert r.status_code == 200
    assert r.get_json()['product']['stock_status'] == 'Out of Stock'

    r = admin.get(f"/api/products/{product['id']}")
    assert r.get_json()['product']['stock'] == 0

    r = admin.delete(f"/api/products/{product['id']}")
    assert r.status_code == 200
    assert admin.get(f"/api/products/{product['id']}").status_code == 404


def test_validation_error_is_400(admin):
    r = admin.post('/api/products', json={'name': '', 'price': 10})
    assert r.status_code == 400
    assert r.get_json()['field'] == 'name'

    r = admin.get('/api/products?status=Nope')
    assert r.status_code == 400


def test_delete_referenced_product_is_409(admin):
    product = create_product(admin)
    login_as(admin, BUYER)
    r = admin.post('/api/orders', json={
        'items': [{'product_id': product['id'], 'quantity': 2, 'price_at_purchase': 49.9}],
        'shipping_address': 'Calle 1',
    })
    assert r.status_code == 201
    order = r.get_json()['order']
    assert order['user_id'] == BUYER['email']
    assert order['total_amount'] == pytest.approx(99.8)

    login_as(admin, ADMIN)
    r = admin.delete(f"/api/products/{product['id']}")
    assert r.status_code == 409
    body = r.get_json()
    assert body['error'] == ReferentialConflictError.REMEDIATION
    assert body['order_ids'] == [order['id']]

    r = admin.post(f"/api/products/{product['id']}/archive")
    assert r.status_code == 200
    assert r.get_json()['product']['status'] == 'Archived'
    assert admin.get('/api/products').get_json()['products'] == []


def test_export_contains_only_filtered_rows(admin):
    create_product(admin, name='Power Bank "Mini"', sku='PB-1')
    create_product(admin, name='Cable USB-C', sku='CB-1', category='Charger & Cable')
    archived = create_product(admin, name='Power Bank Viejo', sku='PB-OLD')
    admin.post(f"/api/products/{archived['id']}/archive")

    r = admin.get('/api/products/export?q=power&status=All')

    assert r.status_code == 200
    assert r.mimetype == 'text/csv'
    assert 'inventory_export_' in r.headers['Content-Disposition']
    text = r.get_data(as_text=True)
    rows = list(csv.reader(io.StringIO(text)))
    assert len(rows) == 2
    assert rows[1][0] == 'Power Bank "Mini"'
    assert '"Power Bank ""Mini"""' in text


def test_order_status_flow(admin):
    product = create_product(admin)
    r = admin.post('/api/orders', json={
        'items': [{'product_id': product['id'], 'quantity': 1, 'price_at_purchase': 10}],
    })
    order_id = r.get_json()['order']['id']

    for status in ['DELIVERED', 'PENDING', 'PENDING', 'CANCELLED']:
        r = admin.post(f'/api/orders/{order_id}/status', json={'status': status})
        assert r.status_code == 200
        assert r.get_json()['order']['status'] == status

    assert admin.post(f'/api/orders/{order_id}/status', json={'status': 'LOST'}).status_code == 400

    detail = admin.get(f'/api/orders/{order_id}').get_json()['order']
    assert detail['items'][0]['product']['name'] == 'Power Bank X'
    assert detail['is_terminal'] is True

    customers = admin.get('/api/customers').get_json()['customers']
    assert customers == [{'user_id': 'ops@tmax.com', 'orders': 1, 'last_order_at': detail['created_at']}]

    assert admin.delete(f'/api/orders/{order_id}').status_code == 200
    assert admin.get(f'/api/orders/{order_id}').status_code == 404
    assert admin.get('/api/orders').get_json()['orders'] == []


def test_malformed_order_input_is_400(admin):
    assert admin.post('/api/orders', json={'items': ['abc']}).status_code == 400
    assert admin.post('/api/orders', json={'items': 'abc'}).status_code == 400

    order_id = admin.post('/api/orders', json={'items': []}).get_json()['order']['id']
    r = admin.post(f'/api/orders/{order_id}/status', json={'status': 5})
    assert r.status_code == 400
    assert r.get_json()['field'] == 'status'


def test_banner_activation_is_exclusive(admin):
    first = admin.post('/api/banners', json={'title': 'Black Friday', 'active': True}).get_json()['banner']
    second = admin.post('/api/banners', json={'title': 'Navidad'}).get_json()['banner']

    r = admin.post(f"/api/banners/{second['id']}/activate")
    assert r.status_code == 200

    banners = admin.get('/api/banners').get_json()['banners']
    assert [b['id'] for b in banners if b['active']] == [second['id']]
    assert banners[0]['id'] == second['id']

    admin.post('/api/settings', json={'banner_activation_mode': 'advisory'})
    admin.post(f"/api/banners/{first['id']}/activate")
    banners = admin.get('/api/banners').get_json()['banners']
    assert len([b for b in banners if b['active']]) == 2

    r = admin.patch(f"/api/banners/{first['id']}", json={'subtitle': 'Hasta 50%'})
    assert r.status_code == 200
    assert r.get_json()['banner']['subtitle'] == 'Hasta 50%'
    assert admin.patch('/api/banners/missing', json={'title': 'X'}).status_code == 404

    assert admin.post('/api/banners/missing/activate').status_code == 404
    assert admin.post('/api/banners', json={'title': ''}).status_code == 400
    assert admin.delete(f"/api/banners/{first['id']}").status_code == 200


def test_settings_and_dashboard(admin):
    create_product(admin, price=2.0, stock=4)
    create_product(admin, price=1.0, stock=6)

    stats = admin.get('/api/dashboard').get_json()['stats']
    assert stats['low_stock_count'] == 2
    assert stats['total_value'] == pytest.approx(14.0)
    assert stats['total_stock'] == 10

    r = admin.post('/api/settings', json={'low_stock_threshold': 5, 'toggle_theme': True})
    assert r.status_code == 200
    assert r.get_json()['settings']['theme'] == 'light'

    body = admin.get('/api/dashboard').get_json()
    assert body['stats']['low_stock_count'] == 1
    assert body['stats']['low_stock_threshold'] == 5
    assert body['orders_by_status']['PENDING'] == 0

    assert admin.post('/api/settings', json={'low_stock_threshold': 0}).status_code == 400
    assert admin.get('/api/settings').get_json()['settings']['low_stock_threshold'] == 5


def test_settings_toggle_is_rolled_into_validation(admin):
    r = admin.post('/api/settings', json={'toggle_theme': True, 'low_stock_threshold': 0})

    assert r.status_code == 400
    assert admin.get('/api/settings').get_json()['settings']['theme'] == 'dark'


def test_audit_endpoint(admin):
    product = create_product(admin, name='Lámpara')
    admin.post(f"/api/products/{product['id']}/archive")

    logs = admin.get('/api/audit', query_string={'q': 'lámpara'}).get_json()['logs']
    assert len(logs) == 2
    assert all(log['user'] == 'ops@tmax.com' for log in logs)


def test_upload_and_serve(admin):
    r = admin.post('/api/uploads', data={'file': (io.BytesIO(b'GIF89a'), 'banner.gif')},
                   content_type='multipart/form-data')
    assert r.status_code == 201
    url = r.get_json()['url']

    served = admin.get(url)
    assert served.status_code == 200
    assert served.data == b'GIF89a'

    product = create_product(admin, images=[url])
    assert product['image_url'] == url


def test_upload_errors(admin):
    r = admin.post('/api/uploads', data={'file': (io.BytesIO(b'MZ'), 'virus.exe')},
                   content_type='multipart/form-data')
    assert r.status_code == 502

    r = admin.post('/api/uploads', data={}, content_type='multipart/form-data')
    assert r.status_code == 400


def test_store_failure_is_503(admin, monkeypatch):
    import os

    def fail(*args, **kwargs):
        raise OSError('disco lleno')

    monkeypatch.setattr(os, 'replace', fail)

    r = admin.post('/api/products', json={'name': 'X', 'price': 1})
    assert r.status_code == 503
