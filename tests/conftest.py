"""
Global test configuration for the portfolio API.

Every test gets a fresh application on an in-memory SQLite database with
the database binary store. S3 behaviour is exercised through FakeS3Client,
which keeps objects in a dict and fails the way botocore does.
"""

import io
from datetime import datetime

import pytest
from botocore.exceptions import ClientError

from app import create_app
from extensions import db
from models import User
from utils import cache
from utils.security import RATE_LIMIT_REQUESTS, hash_password, issue_token
from utils.errors import StorageError, StorageWriteError
from utils.storage import DatabaseBinaryStore, S3BinaryStore, init_storage


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client"""

    def __init__(self):
        self.objects = {}

    def _missing(self, code, operation):
        return ClientError({'Error': {'Code': code, 'Message': 'Not Found'}}, operation)

    def put_object(self, Bucket, Key, Body, ContentType=None, Metadata=None):
        self.objects[(Bucket, Key)] = {
            'Body': bytes(Body),
            'ContentType': ContentType,
            'Metadata': dict(Metadata or {}),
            'LastModified': datetime.utcnow()
        }
        return {'ETag': '"fake"'}

    def get_object(self, Bucket, Key):
        obj = self.objects.get((Bucket, Key))
        if obj is None:
            raise self._missing('NoSuchKey', 'GetObject')
        return {
            'Body': io.BytesIO(obj['Body']),
            'ContentType': obj['ContentType'],
            'Metadata': obj['Metadata'],
            'ContentLength': len(obj['Body'])
        }

    def head_object(self, Bucket, Key):
        obj = self.objects.get((Bucket, Key))
        if obj is None:
            raise self._missing('404', 'HeadObject')
        return {
            'ContentType': obj['ContentType'],
            'Metadata': obj['Metadata'],
            'ContentLength': len(obj['Body']),
            'LastModified': obj['LastModified']
        }

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)
        return {}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        return f"https://{Params['Bucket']}.s3.test/{Params['Key']}?X-Amz-Expires={ExpiresIn}"


@pytest.fixture(autouse=True)
def _reset_process_state():
    """The listing cache and rate limiter live at module level"""
    cache.clear()
    RATE_LIMIT_REQUESTS.clear()
    yield
    cache.clear()
    RATE_LIMIT_REQUESTS.clear()


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def s3_app(app, s3_client):
    """Application whose binary store is S3 backed by FakeS3Client"""
    init_storage(app, S3BinaryStore('test-bucket', client=s3_client))
    return app


@pytest.fixture
def user_id(app):
    with app.app_context():
        user = User(name='Owner', email='owner@example.com', password_hash=hash_password('secret-password'))
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def auth_headers(app, user_id):
    with app.app_context():
        token = issue_token(db.session.get(User, user_id))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def upload():
    """Factory for multipart file tuples accepted by the test client"""
    def make(content=b'\x89PNG fake image bytes', filename='image.png'):
        return (io.BytesIO(content), filename)
    return make


class FlakyStore(DatabaseBinaryStore):
    """Database store whose n-th put (or n-th delete) fails"""

    def __init__(self, fail_on=None, fail_delete_on=None):
        self.fail_on = fail_on
        self.fail_delete_on = fail_delete_on
        self.calls = 0
        self.delete_calls = 0

    def put(self, data, filename, folder, mime_type=None):
        self.calls += 1
        if self.calls == self.fail_on:
            raise StorageWriteError('Could not store file')
        return super().put(data, filename, folder, mime_type)

    def delete(self, path):
        self.delete_calls += 1
        if self.delete_calls == self.fail_delete_on:
            db.session.rollback()
            raise StorageError('Could not delete file', payload={'path': path})
        return super().delete(path)


@pytest.fixture
def flaky_store():
    return FlakyStore
