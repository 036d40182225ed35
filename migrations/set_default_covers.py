"""
Maintenance Script: Default project covers
Flags the first image (insertion order) as cover for every project that
has images but no flagged cover yet.

Usage:
    python migrations/set_default_covers.py
"""

import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from extensions import db
from models import Project
from utils.covers import select_cover


def set_default_covers():
    """Persist the implicit cover as an explicit flag"""
    updated = 0
    projects = Project.query.order_by(Project.id).all()
    print(f"Checking {len(projects)} projects...")

    for project in projects:
        if not project.images or any(image.is_cover for image in project.images):
            continue
        cover = select_cover(project.images)
        cover.is_cover = True
        updated += 1
        print(f"  Project {project.id} ({project.name}): cover set to image {cover.id}")

    db.session.commit()
    return updated


def main():
    app = create_app()
    with app.app_context():
        count = set_default_covers()
        print(f"✓ Done: {count} projects updated")


if __name__ == '__main__':
    main()
