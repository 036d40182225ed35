import re

import pytest
from botocore.exceptions import ClientError

from models import ImageStorage
from utils.errors import NotFoundError, StorageError, StorageWriteError
from utils.storage import (
    DatabaseBinaryStore, S3BinaryStore, create_storage, generate_path, get_storage
)
from config import TestingConfig


PNG = b'\x89PNG\r\n\x1a\nsome image bytes'


def test_generate_path_is_fresh_and_sanitized():
    first = generate_path('my photo.PNG', 'projects')
    second = generate_path('my photo.PNG', 'projects')
    assert first != second
    assert re.match(r'^projects/\d+_[0-9a-f]{10}_my_photo\.PNG$', first)


def test_generate_path_without_usable_name():
    assert generate_path('../../', '/skills/').startswith('skills/')
    assert generate_path('../../', 'skills').endswith('_file')


@pytest.fixture(params=['database', 's3'])
def store(request, app, s3_client):
    """Both backends behind the same contract"""
    with app.app_context():
        if request.param == 's3':
            yield S3BinaryStore('test-bucket', client=s3_client)
        else:
            yield DatabaseBinaryStore()


def test_put_then_get_returns_same_bytes(store):
    path = store.put(PNG, 'logo.png', 'skills', 'image/png')
    stored = store.get(path)
    assert stored.data == PNG
    assert stored.mime_type == 'image/png'
    assert stored.filename == 'logo.png'


def test_put_guesses_mime_type(store):
    path = store.put(b'%PDF-1.4', 'resume.pdf', 'cvs')
    assert store.info(path).mime_type == 'application/pdf'


def test_info_reports_size_and_name(store):
    path = store.put(PNG, 'cover photo.png', 'category_covers', 'image/png')
    info = store.info(path)
    assert info.path == path
    assert info.filename == 'cover photo.png'
    assert info.size == len(PNG)


def test_delete_missing_path_returns_false(store):
    assert store.delete('projects/does-not-exist.png') is False


def test_delete_existing_path(store):
    path = store.put(PNG, 'a.png', 'projects', 'image/png')
    assert store.exists(path)
    assert store.delete(path) is True
    assert not store.exists(path)
    with pytest.raises(NotFoundError):
        store.get(path)


def test_present_missing_path_is_none(store):
    assert store.present('projects/gone.png') is None


def test_database_present_is_data_uri(app):
    with app.app_context():
        store = get_storage()
        path = store.put(PNG, 'a.png', 'projects', 'image/png')
        assert store.present(path).startswith('data:image/png;base64,')
        assert ImageStorage.query.filter_by(path=path).one().size == len(PNG)


def test_s3_present_uses_public_url(app, s3_client):
    with app.app_context():
        store = S3BinaryStore('test-bucket', client=s3_client, public_url='https://cdn.example.com/')
        path = store.put(PNG, 'a.png', 'projects', 'image/png')
        assert store.present(path) == f'https://cdn.example.com/{path}'


def test_s3_present_falls_back_to_presigned_url(app, s3_client):
    with app.app_context():
        store = S3BinaryStore('test-bucket', client=s3_client, presigned_expiry=60)
        path = store.put(PNG, 'a.png', 'projects', 'image/png')
        assert store.present(path).endswith(f'{path}?X-Amz-Expires=60')


def test_s3_write_failure_raises_storage_write_error(app, s3_client, monkeypatch):
    def fail(**kwargs):
        raise ClientError({'Error': {'Code': 'AccessDenied', 'Message': 'denied'}}, 'PutObject')

    monkeypatch.setattr(s3_client, 'put_object', fail)
    with app.app_context():
        store = S3BinaryStore('test-bucket', client=s3_client)
        with pytest.raises(StorageWriteError):
            store.put(PNG, 'a.png', 'projects')


def test_s3_unexpected_read_error_is_storage_error(app, s3_client, monkeypatch):
    def fail(**kwargs):
        raise ClientError({'Error': {'Code': 'InternalError', 'Message': 'boom'}}, 'HeadObject')

    monkeypatch.setattr(s3_client, 'head_object', fail)
    with app.app_context():
        store = S3BinaryStore('test-bucket', client=s3_client)
        with pytest.raises(StorageError):
            store.exists('projects/a.png')


def _config(**overrides):
    config = {key: getattr(TestingConfig, key) for key in dir(TestingConfig) if key.isupper()}
    config.update(overrides)
    return config


def test_create_storage_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_storage(_config(STORAGE_BACKEND='ftp'))


def test_create_storage_requires_bucket_for_s3():
    with pytest.raises(ValueError):
        create_storage(_config(STORAGE_BACKEND='s3', AWS_BUCKET=None))


def test_create_storage_requires_asset_class_rules():
    with pytest.raises(ValueError):
        create_storage(_config(MAX_FILE_SIZE={'image': 1024}))


def test_create_storage_defaults_to_database():
    assert isinstance(create_storage(_config()), DatabaseBinaryStore)
