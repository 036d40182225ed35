"""
Maintenance Script: Binary store probe
Writes, reads and deletes a probe object on the configured backend.

Usage:
    python migrations/check_storage.py
"""

import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from utils.errors import PortfolioError
from utils.storage import get_storage

PROBE_DATA = b'portfolio storage probe'


def check_storage():
    """Run put / exists / get / delete against the store; returns True when every step passes"""
    store = get_storage()
    print(f"Backend: {store.name}")

    try:
        path = store.put(PROBE_DATA, 'probe.txt', 'healthcheck', 'text/plain')
        print(f"  ✓ put -> {path}")

        if not store.exists(path):
            print("  ✗ exists: probe object not found after write")
            return False
        print("  ✓ exists")

        stored = store.get(path)
        if stored.data != PROBE_DATA:
            print("  ✗ get: content mismatch")
            return False
        print(f"  ✓ get ({stored.mime_type})")

        store.delete(path)
        if store.exists(path):
            print("  ✗ delete: probe object still present")
            return False
        print("  ✓ delete")
    except PortfolioError as e:
        print(f"  ✗ {type(e).__name__}: {e.message}")
        return False

    return True


def main():
    app = create_app()
    with app.app_context():
        ok = check_storage()
    print("✓ Storage is healthy" if ok else "✗ Storage check failed")
    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
