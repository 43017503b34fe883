import os

import pytest

from catalog_admin.errors import UploadError
from catalog_admin.services.upload_service import LocalImageUploader, allowed_file


def test_upload_writes_file_and_returns_url(tmp_path):
    uploader = LocalImageUploader(str(tmp_path / 'uploads'))

    url = uploader.upload(b'\x89PNG fake', 'foto producto.PNG')

    assert url.startswith('/uploads/')
    assert url.endswith('_foto_producto.PNG')
    saved = tmp_path / 'uploads' / url.rsplit('/', 1)[1]
    assert saved.read_bytes() == b'\x89PNG fake'


def test_upload_names_are_unique(tmp_path):
    uploader = LocalImageUploader(str(tmp_path))

    assert uploader.upload(b'a', 'x.jpg') != uploader.upload(b'b', 'x.jpg')


@pytest.mark.parametrize('name', ['script.exe', 'sin_extension', '', None])
def test_rejects_disallowed_names(tmp_path, name):
    with pytest.raises(UploadError):
        LocalImageUploader(str(tmp_path)).upload(b'data', name)


def test_rejects_empty_data(tmp_path):
    with pytest.raises(UploadError):
        LocalImageUploader(str(tmp_path)).upload(b'', 'a.png')


def test_write_failure_is_upload_error(tmp_path, monkeypatch):
    def fail(*args, **kwargs):
        raise OSError('sin permisos')

    monkeypatch.setattr(os, 'makedirs', fail)

    with pytest.raises(UploadError):
        LocalImageUploader(str(tmp_path / 'nuevo')).upload(b'data', 'a.webp')


def test_allowed_file():
    assert allowed_file('a.jpeg')
    assert allowed_file('A.GIF')
    assert not allowed_file('a.svg')
