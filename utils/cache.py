"""
Cache Module - Short-lived in-process cache for rendered listing pages
"""

import threading
import time

from flask import current_app


_CACHE = {}  # {key: (expires_at, value)}
_LOCK = threading.Lock()


def listing_key(prefix, page):
    return f"{prefix}_page_{page}"


def remember(key, ttl, producer):
    """Return the cached value for `key`, computing and storing it when absent or expired"""
    now = time.time()
    with _LOCK:
        entry = _CACHE.get(key)
        if entry and entry[0] > now:
            return entry[1]

    value = producer()
    with _LOCK:
        _CACHE[key] = (now + ttl, value)
    return value


def forget(key):
    with _LOCK:
        return _CACHE.pop(key, None) is not None


def clear():
    with _LOCK:
        _CACHE.clear()


def invalidate_listing(prefix, pages=None):
    """Drop the first N cached pages of a listing. Failures are logged, never raised."""
    try:
        pages = pages or current_app.config.get('LIST_CACHE_PAGES', 10)
        for page in range(1, pages + 1):
            forget(listing_key(prefix, page))
        current_app.logger.info(f"Listing cache cleared: {prefix} (pages 1-{pages})")
    except Exception as e:
        current_app.logger.warning(f"Failed to clear {prefix} cache: {str(e)}")


__all__ = ['listing_key', 'remember', 'forget', 'clear', 'invalidate_listing']
