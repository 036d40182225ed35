"""
Project Routes - Portfolio projects
Handles: Project CRUD, bulk delete, project images, cover selection
"""

from flask import current_app, jsonify
from flask_login import login_required, current_user
from sqlalchemy.orm import selectinload, joinedload
from extensions import db
from models import Category, Project, ProjectImage
from utils.assets import store_uploads, discard_asset, discard_assets, commit_or_discard
from utils.covers import select_cover, set_cover
from utils.errors import ConflictError, NotFoundError
from utils.helpers import paginate, get_or_404
from utils.presenters import project_summary, project_detail, pagination_to_dict, resolve_asset
from utils.validation import (
    get_payload, get_files, read_upload, clean_string, clean_int, clean_id_list,
    add_error, raise_if_errors
)
from . import projects_bp


def _read_images(errors, required=False):
    files = get_files('images')
    if required and not files:
        add_error(errors, 'images', 'At least one image is required.')
    uploads = [read_upload(f, 'image', f'images.{i}', errors) for i, f in enumerate(files)]
    return [u for u in uploads if u]


def _clean_category(data, errors, required):
    category_id = clean_int(data, 'category_id', errors, required=required)
    if category_id is not None and db.session.get(Category, category_id) is None:
        add_error(errors, 'category_id', 'The selected category is invalid.')
        return None
    return category_id


def _clean_cover_index(data, errors, image_count):
    cover_index = clean_int(data, 'cover_index', errors, minimum=0)
    if cover_index is not None and cover_index >= image_count:
        add_error(errors, 'cover_index', 'The cover index does not match an uploaded image.')
        return None
    return cover_index


def _attach_images(project, paths, cover_index=None):
    for index, path in enumerate(paths):
        project.images.append(ProjectImage(path=path, is_cover=(index == cover_index)))


@projects_bp.route('/projects', methods=['GET'])
def list_projects():
    """Paginated project summaries, only the cover image is resolved"""
    query = (Project.query
             .options(selectinload(Project.images), joinedload(Project.category))
             .order_by(Project.created_at.desc(), Project.id.desc()))
    pagination = paginate(query, current_app.config['PROJECTS_PER_PAGE'])
    return jsonify({
        'status': 'success',
        'projects': [project_summary(p) for p in pagination.items],
        'pagination': pagination_to_dict(pagination)
    }), 200


@projects_bp.route('/projects', methods=['POST'])
@login_required
def create_project():
    """Create a project with its images, stored before the rows are written"""
    data = get_payload()
    errors = {}
    name = clean_string(data, 'name', errors, required=True)
    description = clean_string(data, 'description', errors, required=True, max_length=5000)
    category_id = _clean_category(data, errors, required=True)
    uploads = _read_images(errors)
    cover_index = _clean_cover_index(data, errors, len(uploads))
    raise_if_errors(errors)

    existing = Project.query.filter_by(name=name, description=description, category_id=category_id).first()
    if existing:
        raise ConflictError('Project already exists', payload={'project': project_summary(existing)})

    paths = store_uploads(uploads, 'projects')

    project = Project(name=name, description=description, category_id=category_id,
                      user_id=current_user.id)
    _attach_images(project, paths, cover_index)
    db.session.add(project)
    commit_or_discard(paths, action='create project')

    current_app.logger.info(f"Project created: {project.id} with {len(paths)} images")
    return jsonify({
        'message': 'Project created successfully',
        'project': project_detail(project)
    }), 201


@projects_bp.route('/projects/<int:project_id>', methods=['GET'])
def show_project(project_id):
    project = get_or_404(Project, project_id, 'Project')
    return jsonify({
        'success': True,
        'project': project_detail(project)
    }), 200


@projects_bp.route('/projects/<int:project_id>', methods=['PUT', 'PATCH'])
@login_required
def update_project(project_id):
    """Update fields; uploaded images replace the whole set (store new, commit, delete old)"""
    project = get_or_404(Project, project_id, 'Project')

    data = get_payload()
    errors = {}
    name = clean_string(data, 'name', errors)
    description = clean_string(data, 'description', errors, max_length=5000)
    category_id = _clean_category(data, errors, required=False)
    uploads = _read_images(errors)
    cover_index = _clean_cover_index(data, errors, len(uploads))
    raise_if_errors(errors)

    paths = store_uploads(uploads, 'projects')

    if name:
        project.name = name
    if description is not None:
        project.description = description
    if category_id is not None:
        project.category_id = category_id

    old_paths = []
    if paths:
        old_paths = [image.path for image in project.images]
        project.images.clear()
        _attach_images(project, paths, cover_index)
    commit_or_discard(paths, action=f'update project {project_id}')

    discard_assets(old_paths)

    current_app.logger.info(f"Project {project_id} updated")
    return jsonify({
        'message': 'Project updated successfully',
        'project': project_detail(project)
    }), 200


def _delete_projects(projects):
    """Drop owned binaries best-effort, then the rows (images cascade).

    Every binary goes before any row is queued: a failing delete on the
    database backend rolls the shared session back.
    """
    discard_assets([image.path for project in projects for image in project.images])
    for project in projects:
        db.session.delete(project)


@projects_bp.route('/projects/<int:project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    project = get_or_404(Project, project_id, 'Project')
    _delete_projects([project])
    db.session.commit()
    current_app.logger.info(f"Project {project_id} deleted")
    return jsonify({'message': 'Project and its images deleted successfully'}), 200


@projects_bp.route('/projects/bulk-delete', methods=['POST'])
@login_required
def bulk_delete_projects():
    errors = {}
    ids = clean_id_list(get_payload(), 'ids', errors)
    raise_if_errors(errors)

    projects = Project.query.filter(Project.id.in_(ids)).all()
    deleted = sorted(p.id for p in projects)
    _delete_projects(projects)
    db.session.commit()

    missing = sorted(set(ids) - set(deleted))
    current_app.logger.info(f"Projects bulk deleted: {deleted}")
    return jsonify({
        'message': f'{len(deleted)} projects deleted successfully',
        'deleted': deleted,
        'not_found': missing
    }), 200


@projects_bp.route('/projects/<int:project_id>/cover', methods=['PUT'])
@login_required
def set_cover_image(project_id):
    errors = {}
    image_id = clean_int(get_payload(), 'image_id', errors, required=True)
    raise_if_errors(errors)

    set_cover(project_id, image_id)
    project = get_or_404(Project, project_id, 'Project')
    return jsonify({
        'message': 'Cover image updated successfully',
        'project': project_detail(project)
    }), 200


@projects_bp.route('/projects/<int:project_id>/images', methods=['POST'])
@login_required
def add_project_images(project_id):
    """Append images after the existing ones"""
    project = get_or_404(Project, project_id, 'Project')

    errors = {}
    uploads = _read_images(errors, required=True)
    raise_if_errors(errors)

    paths = store_uploads(uploads, 'projects')
    _attach_images(project, paths)
    commit_or_discard(paths, action=f'add images to project {project_id}')

    current_app.logger.info(f"Project {project_id}: {len(paths)} images added")
    return jsonify({
        'message': 'Images added successfully',
        'project': project_detail(project)
    }), 201


@projects_bp.route('/projects/<int:project_id>/images/<int:image_id>', methods=['DELETE'])
@login_required
def delete_project_image(project_id, image_id):
    """Remove one image; the cover falls back to the first remaining image if it was flagged"""
    project = get_or_404(Project, project_id, 'Project')
    image = db.session.get(ProjectImage, image_id)
    if not image or image.project_id != project.id:
        raise NotFoundError('Image not found for this project')

    discard_asset(image.path)
    project.images.remove(image)
    db.session.commit()

    current_app.logger.info(f"Project {project_id}: image {image_id} deleted")
    return jsonify({
        'message': 'Image deleted successfully',
        'project': project_detail(project)
    }), 200


@projects_bp.route('/projects/images', methods=['POST'])
def load_project_images():
    """Resolve cover images for a batch of project ids"""
    errors = {}
    ids = clean_id_list(get_payload(), 'ids', errors)
    raise_if_errors(errors)

    projects = Project.query.options(selectinload(Project.images)).filter(Project.id.in_(ids)).all()
    covers = {}
    for project in projects:
        cover = select_cover(project.images)
        covers[str(project.id)] = resolve_asset(cover.path) if cover else None
    return jsonify({'covers': covers}), 200
