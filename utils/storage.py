"""
Storage Module - Binary store for uploaded images and documents

Callers only ever hold a path string. The backend is chosen once per
deployment from STORAGE_BACKEND:
- 'database': bytes are base64 encoded into the image_storage table and
  served back through the /api/images endpoint.
- 's3': bytes live in an S3-compatible bucket and are served by URL.
"""

import base64
import mimetypes
import secrets
import time
from collections import namedtuple
from urllib.parse import quote, unquote

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app, url_for
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from extensions import db
from models import ImageStorage
from .errors import NotFoundError, StorageError, StorageWriteError


StoredFile = namedtuple('StoredFile', ['data', 'mime_type', 'filename'])
FileInfo = namedtuple('FileInfo', ['path', 'filename', 'mime_type', 'size', 'created_at'])

DEFAULT_MIME_TYPE = 'application/octet-stream'
BACKENDS = ('database', 's3')


def generate_path(filename, folder):
    """Build a fresh, collision-resistant key: folder/<timestamp>_<random>_<name>"""
    safe_name = secure_filename(filename or '') or 'file'
    return f"{folder.strip('/')}/{int(time.time())}_{secrets.token_hex(5)}_{safe_name}"


def guess_mime_type(filename, mime_type=None):
    if mime_type:
        return mime_type
    guessed, _ = mimetypes.guess_type(filename or '')
    return guessed or DEFAULT_MIME_TYPE


class BinaryStore:
    """Contract shared by every backend"""

    name = None

    def put(self, data, filename, folder, mime_type=None):
        raise NotImplementedError

    def get(self, path):
        raise NotImplementedError

    def info(self, path):
        raise NotImplementedError

    def exists(self, path):
        raise NotImplementedError

    def delete(self, path):
        raise NotImplementedError

    def url(self, path):
        raise NotImplementedError

    def present(self, path):
        """Client-consumable form of a stored asset, or None if it is missing"""
        raise NotImplementedError


class DatabaseBinaryStore(BinaryStore):
    name = 'database'

    def put(self, data, filename, folder, mime_type=None):
        path = generate_path(filename, folder)
        record = ImageStorage(
            path=path,
            filename=filename or 'file',
            image_data=base64.b64encode(data).decode('ascii'),
            mime_type=guess_mime_type(filename, mime_type),
            size=len(data)
        )
        try:
            db.session.add(record)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Database store write failed for {path}: {str(e)}")
            raise StorageWriteError('Could not store file', payload={'path': path}) from e
        return path

    def _find(self, path):
        try:
            return ImageStorage.query.filter_by(path=path).first()
        except SQLAlchemyError as e:
            raise StorageError('Could not read from binary store') from e

    def get(self, path):
        record = self._find(path)
        if not record:
            raise NotFoundError('File not found', payload={'path': path})
        return StoredFile(record.binary, record.mime_type, record.filename)

    def info(self, path):
        record = self._find(path)
        if not record:
            raise NotFoundError('File not found', payload={'path': path})
        return FileInfo(record.path, record.filename, record.mime_type, record.size, record.created_at)

    def exists(self, path):
        try:
            return db.session.query(ImageStorage.query.filter_by(path=path).exists()).scalar()
        except SQLAlchemyError as e:
            raise StorageError('Could not read from binary store') from e

    def delete(self, path):
        record = self._find(path)
        if not record:
            return False
        try:
            db.session.delete(record)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError('Could not delete file', payload={'path': path}) from e
        return True

    def url(self, path):
        return url_for('images.serve_image', path=path, _external=True)

    def present(self, path):
        record = self._find(path)
        if not record:
            return None
        return f"data:{record.mime_type};base64,{record.image_data}"


class S3BinaryStore(BinaryStore):
    name = 's3'
    MISSING_CODES = ('404', 'NoSuchKey', 'NotFound')

    def __init__(self, bucket, client=None, region=None, endpoint_url=None,
                 public_url=None, path_style=False, connect_timeout=5,
                 read_timeout=30, presigned_expiry=3600,
                 access_key=None, secret_key=None):
        self.bucket = bucket
        self.public_url = public_url.rstrip('/') if public_url else None
        self.presigned_expiry = presigned_expiry
        if client is None:
            boto_config = BotoConfig(
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                retries={'max_attempts': 2},
                s3={'addressing_style': 'path' if path_style else 'auto'}
            )
            client = boto3.client(
                's3',
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                config=boto_config
            )
        self.client = client

    @classmethod
    def from_config(cls, config):
        public_url = config.get('AWS_CDN_URL') if config.get('AWS_CDN_ENABLED') else None
        return cls(
            bucket=config['AWS_BUCKET'],
            region=config.get('AWS_DEFAULT_REGION'),
            endpoint_url=config.get('AWS_ENDPOINT'),
            public_url=public_url or config.get('AWS_URL'),
            path_style=config.get('AWS_USE_PATH_STYLE_ENDPOINT', False),
            connect_timeout=config.get('S3_CONNECT_TIMEOUT', 5),
            read_timeout=config.get('S3_READ_TIMEOUT', 30),
            presigned_expiry=config.get('S3_PRESIGNED_EXPIRY', 3600),
            access_key=config.get('AWS_ACCESS_KEY_ID'),
            secret_key=config.get('AWS_SECRET_ACCESS_KEY')
        )

    def _is_missing(self, error):
        return error.response.get('Error', {}).get('Code') in self.MISSING_CODES

    def put(self, data, filename, folder, mime_type=None):
        path = generate_path(filename, folder)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=guess_mime_type(filename, mime_type),
                Metadata={'original-filename': quote(filename or 'file')}
            )
        except (ClientError, BotoCoreError) as e:
            current_app.logger.error(f"S3 upload failed for {path}: {str(e)}")
            raise StorageWriteError('Could not store file', payload={'path': path}) from e
        return path

    def get(self, path):
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=path)
            data = response['Body'].read()
        except ClientError as e:
            if self._is_missing(e):
                raise NotFoundError('File not found', payload={'path': path}) from e
            raise StorageError('Could not read file', payload={'path': path}) from e
        except BotoCoreError as e:
            raise StorageError('Could not read file', payload={'path': path}) from e
        filename = unquote(response.get('Metadata', {}).get('original-filename', '')) or path.rsplit('/', 1)[-1]
        return StoredFile(data, response.get('ContentType', DEFAULT_MIME_TYPE), filename)

    def _head(self, path):
        try:
            return self.client.head_object(Bucket=self.bucket, Key=path)
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise StorageError('Could not read file metadata', payload={'path': path}) from e
        except BotoCoreError as e:
            raise StorageError('Could not read file metadata', payload={'path': path}) from e

    def info(self, path):
        head = self._head(path)
        if head is None:
            raise NotFoundError('File not found', payload={'path': path})
        filename = unquote(head.get('Metadata', {}).get('original-filename', '')) or path.rsplit('/', 1)[-1]
        return FileInfo(path, filename, head.get('ContentType', DEFAULT_MIME_TYPE),
                        head.get('ContentLength', 0), head.get('LastModified'))

    def exists(self, path):
        return self._head(path) is not None

    def delete(self, path):
        if not self.exists(path):
            return False
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except (ClientError, BotoCoreError) as e:
            raise StorageError('Could not delete file', payload={'path': path}) from e
        return True

    def url(self, path):
        if self.public_url:
            return f"{self.public_url}/{quote(path)}"
        try:
            return self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': path},
                ExpiresIn=self.presigned_expiry
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError('Could not build file URL', payload={'path': path}) from e

    def present(self, path):
        if not self.exists(path):
            return None
        return self.url(path)


def create_storage(config):
    """Build the binary store named by STORAGE_BACKEND"""
    backend = config.get('STORAGE_BACKEND', 'database')
    if backend not in BACKENDS:
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}', expected one of {', '.join(BACKENDS)}")
    for asset_class in ('image', 'logo', 'document'):
        if asset_class not in config.get('ALLOWED_EXTENSIONS', {}) or asset_class not in config.get('MAX_FILE_SIZE', {}):
            raise ValueError(f"Missing upload rules for asset class '{asset_class}'")
    if backend == 's3':
        if not config.get('AWS_BUCKET'):
            raise ValueError('STORAGE_BACKEND is s3 but AWS_BUCKET is not set')
        return S3BinaryStore.from_config(config)
    return DatabaseBinaryStore()


def init_storage(app, store=None):
    """Validate storage configuration and attach the store to the app"""
    store = store or create_storage(app.config)
    app.extensions['binary_store'] = store
    app.logger.info(f"Binary store initialized: {store.name}")
    return store


def get_storage():
    return current_app.extensions['binary_store']


__all__ = [
    'BinaryStore',
    'DatabaseBinaryStore',
    'S3BinaryStore',
    'StoredFile',
    'FileInfo',
    'generate_path',
    'create_storage',
    'init_storage',
    'get_storage'
]
