"""
Decorators Module - Response and request guards shared by the blueprints
"""

from functools import wraps
from flask import jsonify, make_response


def no_cache(f):
    """Decorator to mark a response as never cacheable"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = make_response(f(*args, **kwargs))
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        return response
    return decorated_function


def rate_limited(endpoint):
    """Decorator to reject clients that exceed the per-IP request budget"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            from .security import check_rate_limit
            if not check_rate_limit(endpoint):
                return jsonify({'message': 'Too many requests. Please try again later.'}), 429
            return f(*args, **kwargs)
        return decorated_function
    return decorator


__all__ = ['no_cache', 'rate_limited']
