import os
import sys

import pytest

# ensure project root is on sys.path when running from tests/ folder
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from catalog_admin import performance_logger
from catalog_admin.app_container import AppContainer
from catalog_admin.main import create_app
from catalog_admin.repositories import (
    AuditRepository,
    BannerRepository,
    OrderRepository,
    ProductRepository,
    SettingsRepository,
)
from catalog_admin.services import (
    AuditService,
    BannerService,
    OrderService,
    ProductService,
    SettingsService,
)


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Los logs de profiling van al tmp de cada test."""
    monkeypatch.setattr(performance_logger, 'LOGS_DIR', str(tmp_path / 'logs'))
    yield
    AppContainer.reset_instance()


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / 'data'
    path.mkdir()
    return str(path)


@pytest.fixture
def product_repo(data_dir):
    return ProductRepository(data_dir)


@pytest.fixture
def order_repo(data_dir):
    return OrderRepository(data_dir)


@pytest.fixture
def banner_repo(data_dir):
    return BannerRepository(data_dir)


@pytest.fixture
def audit_repo(data_dir):
    return AuditRepository(data_dir)


@pytest.fixture
def settings_repo(data_dir):
    return SettingsRepository(data_dir)


@pytest.fixture
def audit_service(audit_repo):
    return AuditService(audit_repo)


@pytest.fixture
def product_service(product_repo, order_repo, audit_service):
    return ProductService(product_repo, order_repo, audit_service)


@pytest.fixture
def order_service(order_repo, product_repo, audit_service):
    return OrderService(order_repo, product_repo, audit_service)


@pytest.fixture
def settings_service(settings_repo, audit_service):
    service = SettingsService(settings_repo, audit_service)
    service.load()
    return service


@pytest.fixture
def banner_service(banner_repo, settings_service, audit_service):
    return BannerService(banner_repo, settings_service.get_banner_activation_mode, audit_service)


@pytest.fixture
def app(data_dir, monkeypatch):
    monkeypatch.delenv('ADMIN_EMAIL_DOMAIN', raising=False)
    monkeypatch.setenv('CATALOG_SECRET_KEY', 'test-secret')
    application = create_app(data_dir)
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
