"""
Migration Script: Legacy uploads to the binary store
Imports files referenced by categories, projects, skills and CVs from a
legacy uploads directory into the configured binary store and rewrites
the stored paths. References that already resolve in the store are
skipped.

Usage:
    python migrations/migrate_files_to_store.py [uploads_dir]
"""

import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import current_app

from app import create_app
from extensions import db
from models import Category, ProjectImage, Skill, Cv
from utils.errors import StorageError
from utils.storage import get_storage

DEFAULT_UPLOADS_DIR = 'storage/app/public'

# (model, path attribute, folder key)
REFERENCES = [
    (Category, 'cover', 'categories'),
    (ProjectImage, 'path', 'projects'),
    (Skill, 'logo', 'skills'),
    (Cv, 'cv_fr_path', 'cvs'),
    (Cv, 'cv_en_path', 'cvs'),
]


def migrate_reference(store, folders, uploads_dir, instance, attribute, folder_key, stats):
    """Import one referenced file; returns True when the row was rewritten"""
    path = getattr(instance, attribute)
    if not path:
        return False
    if store.exists(path):
        stats['skipped'] += 1
        return False

    source = os.path.join(uploads_dir, path)
    if not os.path.isfile(source):
        print(f"  ✗ {type(instance).__name__} {instance.id}: missing file {source}")
        stats['errors'] += 1
        return False

    with open(source, 'rb') as f:
        data = f.read()
    new_path = store.put(data, os.path.basename(path), folders[folder_key])
    setattr(instance, attribute, new_path)
    db.session.commit()
    print(f"  ✓ {type(instance).__name__} {instance.id}: {path} -> {new_path}")
    stats['migrated'] += 1
    return True


def migrate_files(uploads_dir):
    store = get_storage()
    folders = current_app.config['STORAGE_FOLDERS']
    stats = {'migrated': 0, 'skipped': 0, 'errors': 0}

    for model, attribute, folder_key in REFERENCES:
        rows = model.query.filter(getattr(model, attribute).isnot(None)).order_by(model.id).all()
        print(f"Migrating {len(rows)} {model.__tablename__}.{attribute} references...")
        for instance in rows:
            try:
                migrate_reference(store, folders, uploads_dir, instance, attribute, folder_key, stats)
            except (StorageError, OSError) as e:
                db.session.rollback()
                print(f"  ✗ {model.__name__} {instance.id}: {str(e)}")
                stats['errors'] += 1

    return stats


def main():
    uploads_dir = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_UPLOADS_DIR
    app = create_app()
    with app.app_context():
        stats = migrate_files(uploads_dir)
    print(f"✓ Done: {stats['migrated']} migrated, {stats['skipped']} skipped, {stats['errors']} errors")
    return 1 if stats['errors'] else 0


if __name__ == '__main__':
    sys.exit(main())
