import json
import os

import pytest

from catalog_admin.errors import ValidationError
from catalog_admin.repositories import SettingsRepository
from catalog_admin.services import SettingsService


def test_defaults_when_store_is_empty(settings_service):
    current = settings_service.current

    assert current.low_stock_threshold == 10
    assert current.theme == 'dark'
    assert current.banner_activation_mode == 'exclusive'


def test_threshold_is_persisted(settings_service, data_dir):
    settings_service.update({'low_stock_threshold': '5'}, user='ops@tmax.com')

    assert settings_service.get_low_stock_threshold() == 5
    with open(os.path.join(data_dir, 'settings.json'), encoding='utf-8') as f:
        assert json.load(f)['low_stock_threshold'] == 5

    reloaded = SettingsService(SettingsRepository(data_dir))
    assert reloaded.load().low_stock_threshold == 5


@pytest.mark.parametrize('value', [0, -2, 'diez', None, True, 3.7, '2.5'])
def test_invalid_threshold_rejected(settings_service, value):
    with pytest.raises(ValidationError):
        settings_service.update({'low_stock_threshold': value})
    assert settings_service.get_low_stock_threshold() == 10


def test_toggle_theme(settings_service, audit_service):
    assert settings_service.update({}, user='ops@tmax.com', toggle_theme=True).theme == 'light'
    assert settings_service.update({}, user='ops@tmax.com', toggle_theme=True).theme == 'dark'
    assert [log['type'] for log in audit_service.get_recent()] == ['AJUSTES', 'AJUSTES']


def test_update_validates_everything_first(settings_service):
    with pytest.raises(ValidationError):
        settings_service.update({'theme': 'light', 'low_stock_threshold': 0})

    assert settings_service.get_theme() == 'dark'


def test_update_applies_known_keys(settings_service):
    current = settings_service.update({
        'theme': 'LIGHT',
        'banner_activation_mode': 'advisory',
        'unknown': 1,
    })

    assert current.theme == 'light'
    assert current.banner_activation_mode == 'advisory'


def test_invalid_stored_values_fall_back(data_dir):
    with open(os.path.join(data_dir, 'settings.json'), 'w', encoding='utf-8') as f:
        json.dump({'low_stock_threshold': 'x', 'theme': 'pink', 'banner_activation_mode': 'loud'}, f)

    current = SettingsService(SettingsRepository(data_dir)).load()

    assert current.low_stock_threshold == 10
    assert current.theme == 'dark'
    assert current.banner_activation_mode == 'exclusive'


def test_failed_write_keeps_settings(settings_service, settings_repo, monkeypatch):
    from catalog_admin.errors import TransientStoreError

    def broken(values):
        raise TransientStoreError('disco lleno')

    monkeypatch.setattr(settings_repo, 'save_settings', broken)

    with pytest.raises(TransientStoreError):
        settings_service.update({'low_stock_threshold': 3})
    assert settings_service.get_low_stock_threshold() == 10

    with pytest.raises(TransientStoreError):
        settings_service.update({'low_stock_threshold': 4, 'banner_activation_mode': 'advisory'})
    assert settings_service.current.to_dict() == {
        'low_stock_threshold': 10,
        'theme': 'dark',
        'banner_activation_mode': 'exclusive',
    }


def test_threshold_accepts_whole_float(settings_service):
    assert settings_service.update({'low_stock_threshold': 4.0}).low_stock_threshold == 4


def test_toggle_with_invalid_key_changes_nothing(settings_service, settings_repo):
    with pytest.raises(ValidationError):
        settings_service.update({'low_stock_threshold': 0}, toggle_theme=True)

    assert settings_service.get_theme() == 'dark'
    assert settings_repo.load() == {}


def test_update_writes_all_keys_at_once(settings_service, settings_repo, audit_service, monkeypatch):
    writes = []
    original = settings_repo.save_settings

    def recording(values):
        writes.append(dict(values))
        original(values)

    monkeypatch.setattr(settings_repo, 'save_settings', recording)

    current = settings_service.update({'low_stock_threshold': 3}, user='ops@tmax.com', toggle_theme=True)

    assert writes == [{'low_stock_threshold': 3, 'theme': 'light'}]
    assert current.theme == 'light'
    assert current.low_stock_threshold == 3
    assert len(audit_service.get_recent()) == 2


def test_explicit_theme_wins_over_toggle(settings_service):
    assert settings_service.update({'theme': 'dark'}, toggle_theme=True).theme == 'dark'
