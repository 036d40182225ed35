"""
Utils Package - Centralized utility modules initialization
"""

from .errors import (
    PortfolioError,
    ValidationError,
    NotFoundError,
    ConflictError,
    ReferentialIntegrityError,
    StorageError,
    StorageWriteError
)
from .storage import (
    BinaryStore,
    DatabaseBinaryStore,
    S3BinaryStore,
    create_storage,
    init_storage,
    get_storage
)
from .assets import store_upload, store_uploads, discard_asset, discard_assets, commit_or_discard
from .covers import select_cover, set_cover
from .cache import remember, invalidate_listing
from .retry import retry
from .decorators import no_cache, rate_limited

__all__ = [
    # Errors
    'PortfolioError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
    'ReferentialIntegrityError',
    'StorageError',
    'StorageWriteError',

    # Storage
    'BinaryStore',
    'DatabaseBinaryStore',
    'S3BinaryStore',
    'create_storage',
    'init_storage',
    'get_storage',

    # Assets
    'store_upload',
    'store_uploads',
    'discard_asset',
    'discard_assets',
    'commit_or_discard',

    # Covers
    'select_cover',
    'set_cover',

    # Cache / Retry
    'remember',
    'invalidate_listing',
    'retry',

    # Decorators
    'no_cache',
    'rate_limited'
]
