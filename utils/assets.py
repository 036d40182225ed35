"""
Assets Module - Lifecycle of binaries owned by entities

Ordering rules:
- create: store the bytes first, write the returned path only afterwards
- replace: store new, commit the entity, then delete the old binary
- delete: drop owned binaries best-effort before any row is queued for
  deletion; the entity row decides what the user sees, an orphaned blob
  is tolerated

The database backend commits the shared session inside put() and delete(),
and rolls it back when either fails, so binaries must be handled before any
entity change is pending.
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from .errors import StorageError, StorageWriteError
from .storage import get_storage


def folder_for(folder_key):
    return current_app.config['STORAGE_FOLDERS'][folder_key]


def store_upload(upload, folder_key):
    """Persist one validated Upload and return its path"""
    path = get_storage().put(upload.data, upload.filename, folder_for(folder_key), upload.mime_type)
    current_app.logger.info(f"Stored {upload.filename} ({upload.size} bytes) at {path}")
    return path


def store_uploads(uploads, folder_key):
    """Persist several uploads; if one fails the ones already stored are dropped"""
    paths = []
    try:
        for upload in uploads:
            paths.append(store_upload(upload, folder_key))
    except StorageError:
        discard_assets(paths)
        raise
    return paths


def discard_asset(path):
    """Best-effort delete. Never raises; returns True if a binary was removed."""
    if not path:
        return False
    try:
        deleted = get_storage().delete(path)
    except StorageError as e:
        current_app.logger.warning(f"Failed to delete stored file {path}: {e.message}")
        return False
    if deleted:
        current_app.logger.info(f"Stored file deleted: {path}")
    else:
        current_app.logger.info(f"Stored file already absent: {path}")
    return deleted


def discard_assets(paths):
    return sum(1 for path in paths if discard_asset(path))


def commit_or_discard(new_paths=(), action='save changes'):
    """Commit the session; on failure roll back and drop the binaries stored for it"""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to {action}: {str(e)}")
        discard_assets(new_paths)
        raise StorageWriteError(f'Could not {action}, please retry') from e


__all__ = [
    'store_upload',
    'store_uploads',
    'discard_asset',
    'discard_assets',
    'commit_or_discard'
]
