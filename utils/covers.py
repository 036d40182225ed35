"""
Covers Module - Which image of a project is shown as its thumbnail
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Project, ProjectImage
from .errors import NotFoundError, StorageWriteError


def select_cover(images):
    """Return the flagged cover, else the first image in insertion order, else None.

    `images` must already be in insertion order. Should more than one image
    carry the flag, the earliest flagged one wins.
    """
    if not images:
        return None
    for image in images:
        if image.is_cover:
            return image
    return images[0]


def set_cover(project_id, image_id):
    """Flag `image_id` as the cover of `project_id`, unflagging its siblings in the same transaction"""
    project = db.session.get(Project, project_id)
    if not project:
        raise NotFoundError('Project not found')

    image = db.session.get(ProjectImage, image_id)
    if not image or image.project_id != project.id:
        raise NotFoundError('Image not found for this project', payload={'image_id': image_id})

    try:
        ProjectImage.query.filter(
            ProjectImage.project_id == project.id,
            ProjectImage.id != image.id
        ).update({'is_cover': False})
        image.is_cover = True
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to set cover {image_id} on project {project_id}: {str(e)}")
        raise StorageWriteError('Could not update cover image, please retry') from e

    current_app.logger.info(f"Project {project_id} cover set to image {image_id}")
    return image


__all__ = ['select_cover', 'set_cover']
