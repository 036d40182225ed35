"""
Presenters Module - Model to dictionary conversion for API responses

Stored asset paths are resolved on the way out, never persisted: the
database backend yields inline `data:<mime>;base64,<payload>` strings,
the S3 backend yields URLs. A path whose binary is gone resolves to None
and the rest of the response is still rendered.
"""

from flask import current_app, url_for

from .covers import select_cover
from .errors import NotFoundError, StorageError
from .storage import get_storage


DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'


def _format_datetime(value):
    return value.strftime(DATETIME_FORMAT) if value else None


def resolve_asset(path):
    """Client-consumable form of a stored path, or None for an empty or broken reference"""
    if not path:
        return None
    try:
        resolved = get_storage().present(path)
    except StorageError as e:
        current_app.logger.warning(f"Could not resolve stored file {path}: {e.message}")
        return None
    if resolved is None:
        current_app.logger.warning(f"Broken asset reference: {path}")
    return resolved


def image_to_dict(image, is_cover=False):
    return {
        'id': image.id,
        'path': image.path,
        'image_url': resolve_asset(image.path),
        'is_cover': is_cover
    }


def category_to_dict(category):
    """Convert category model to dictionary"""
    return {
        'id': category.id,
        'name': category.name,
        'description': category.description,
        'cover': resolve_asset(category.cover),
        'created_at': _format_datetime(category.created_at)
    }


def category_ref(category):
    if not category:
        return None
    return {'id': category.id, 'name': category.name}


def project_summary(project):
    """Listing view: only the selected cover is resolved"""
    cover = select_cover(project.images)
    return {
        'id': project.id,
        'name': project.name,
        'description': project.description,
        'category_id': project.category_id,
        'category': category_ref(project.category),
        'cover_image': resolve_asset(cover.path) if cover else None,
        'cover_image_id': cover.id if cover else None,
        'images_count': len(project.images),
        'created_at': _format_datetime(project.created_at)
    }


def project_detail(project):
    """Detail view: every image is resolved, `is_cover` reflects the selection"""
    cover = select_cover(project.images)
    images = [image_to_dict(image, is_cover=(cover is not None and image.id == cover.id))
              for image in project.images]
    cover_image = next((image['image_url'] for image in images if image['is_cover']), None)
    return {
        'id': project.id,
        'name': project.name,
        'description': project.description,
        'category_id': project.category_id,
        'category': category_to_dict(project.category) if project.category else None,
        'images': images,
        'cover_image': cover_image,
        'created_at': _format_datetime(project.created_at),
        'updated_at': _format_datetime(project.updated_at)
    }


def skill_to_dict(skill):
    """Convert skill model to dictionary"""
    return {
        'id': skill.id,
        'name': skill.name,
        'logo': resolve_asset(skill.logo),
        'created_at': _format_datetime(skill.created_at)
    }


def education_to_dict(education):
    return {
        'id': education.id,
        'diploma': education.diploma,
        'school': education.school,
        'year_start': education.year_start,
        'year_end': education.year_end,
        'description': education.description
    }


def experience_to_dict(experience):
    return {
        'id': experience.id,
        'position': experience.position,
        'company': experience.company,
        'location': experience.location,
        'year_start': experience.year_start,
        'year_end': experience.year_end,
        'currently_working': bool(experience.currently_working),
        'description': experience.description
    }


def cv_slot_to_dict(cv, language):
    """Metadata of one language slot, None when empty or broken"""
    path = getattr(cv, f'cv_{language}_path')
    if not path:
        return None
    try:
        info = get_storage().info(path)
    except NotFoundError:
        current_app.logger.warning(f"Broken CV reference: cv {cv.id} ({language}) -> {path}")
        return None
    except StorageError as e:
        current_app.logger.warning(f"Could not read CV metadata {path}: {e.message}")
        return None
    return {
        'filename': info.filename,
        'mime_type': info.mime_type,
        'size': info.size,
        'uploaded_at': _format_datetime(getattr(cv, f'cv_{language}_uploaded_at')),
        'download_url': url_for('cvs.download_cv', cv_id=cv.id, language=language, _external=True)
    }


def cv_to_dict(cv):
    """Convert CV model to dictionary"""
    return {
        'id': cv.id,
        'user': user_to_dict(cv.user) if cv.user else None,
        'fr': cv_slot_to_dict(cv, 'fr'),
        'en': cv_slot_to_dict(cv, 'en'),
        'created_at': _format_datetime(cv.created_at),
        'updated_at': _format_datetime(cv.updated_at)
    }


def user_to_dict(user):
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email
    }


def contact_to_dict(message):
    """Convert contact message model to dictionary"""
    return {
        'id': message.id,
        'name': message.name,
        'email': message.email,
        'subject': message.subject,
        'message': message.message,
        'read': bool(message.is_read),
        'date': _format_datetime(message.created_at)
    }


def pagination_to_dict(pagination):
    return {
        'current_page': pagination.page,
        'last_page': max(pagination.pages, 1),
        'per_page': pagination.per_page,
        'total': pagination.total
    }


__all__ = [
    'resolve_asset',
    'image_to_dict',
    'category_to_dict',
    'project_summary',
    'project_detail',
    'skill_to_dict',
    'education_to_dict',
    'experience_to_dict',
    'cv_to_dict',
    'user_to_dict',
    'contact_to_dict',
    'pagination_to_dict'
]
