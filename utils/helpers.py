"""
Helpers Module - Utility functions for common route operations
"""

from flask import request
from extensions import db
from .errors import NotFoundError


def get_page():
    """Current page number from the query string, never below 1"""
    page = request.args.get('page', 1, type=int)
    return page if page and page > 0 else 1


def paginate(query, per_page, page=None):
    """Paginate a query without aborting on out-of-range pages"""
    return query.paginate(page=page or get_page(), per_page=per_page, error_out=False)


def get_or_404(model, object_id, label=None):
    """Load a row by primary key or raise NotFoundError"""
    instance = db.session.get(model, object_id)
    if instance is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return instance


__all__ = ['get_page', 'paginate', 'get_or_404']
