"""
Errors Module - Exception taxonomy shared by the API and the storage layer
"""


class PortfolioError(Exception):
    """Base class for errors that map onto an HTTP response"""
    status_code = 500

    def __init__(self, message, payload=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        body = dict(self.payload)
        body['message'] = self.message
        return body


class ValidationError(PortfolioError):
    """Bad input shape, type, extension or size"""
    status_code = 422

    def __init__(self, message, errors=None):
        super().__init__(message, payload={'errors': errors or {}})
        self.errors = errors or {}


class NotFoundError(PortfolioError):
    status_code = 404


class ConflictError(PortfolioError):
    """Duplicate-create guard"""
    status_code = 409


class ReferentialIntegrityError(PortfolioError):
    """An entity is still referenced and cannot be removed"""
    status_code = 422


class StorageError(PortfolioError):
    """Binary store unreachable, or a read/delete failed"""
    status_code = 503


class StorageWriteError(StorageError):
    pass


__all__ = [
    'PortfolioError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
    'ReferentialIntegrityError',
    'StorageError',
    'StorageWriteError'
]
