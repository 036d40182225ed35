"""
Retry Module - Bounded retry with a fixed delay for transient reads
"""

import time

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError


def retry(operation, attempts=3, delay=0.1, retry_on=(SQLAlchemyError,), on_retry=None, description='operation'):
    """Call `operation` up to `attempts` times, sleeping `delay` seconds between tries.

    The last failure is re-raised. `on_retry` runs after each failed attempt
    that will be retried (e.g. a session rollback).
    """
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except retry_on as e:
            current_app.logger.warning(f"{description} attempt {attempt}/{attempts} failed: {str(e)}")
            if attempt == attempts:
                raise
            if on_retry:
                on_retry()
            time.sleep(delay)


__all__ = ['retry']
