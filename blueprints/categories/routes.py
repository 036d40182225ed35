"""
Category Routes - Project categories
Handles: Listing (cached), batch create, update, guarded delete, projects per category
"""

from flask import current_app, jsonify, request
from flask_login import login_required
from extensions import db
from models import Category, Project
from utils.assets import store_upload, store_uploads, discard_asset, commit_or_discard
from utils.cache import remember, listing_key, invalidate_listing
from utils.errors import ConflictError, NotFoundError, ReferentialIntegrityError
from utils.helpers import get_page, paginate, get_or_404
from utils.presenters import category_to_dict, project_detail, pagination_to_dict, resolve_asset
from utils.retry import retry
from utils.validation import (
    get_payload, get_batch, get_file, read_upload, clean_string, clean_id_list, raise_if_errors
)
from . import categories_bp

CACHE_PREFIX = 'categories'


@categories_bp.route('/category', methods=['GET'])
def list_categories():
    """Paginated category listing, memoized per page"""
    page = get_page()

    def render_page():
        query = Category.query.order_by(Category.created_at.desc(), Category.id.desc())
        pagination = paginate(query, current_app.config['CATEGORIES_PER_PAGE'], page=page)
        return {
            'status': 'success',
            'categories': [category_to_dict(c) for c in pagination.items],
            'pagination': pagination_to_dict(pagination)
        }

    payload = remember(listing_key(CACHE_PREFIX, page), current_app.config['LIST_CACHE_TTL'], render_page)
    return jsonify(payload), 200


@categories_bp.route('/category', methods=['POST'])
@login_required
def create_categories():
    """Create one category or a batch of them"""
    items = get_batch(('name', 'description'), 'cover')
    errors = {}
    cleaned = []

    if not items:
        errors['name'] = ['At least one category name is required.']

    for index, (data, cover) in enumerate(items):
        name = clean_string(data, 'name', errors, required=True)
        description = clean_string(data, 'description', errors, max_length=500)
        upload = read_upload(cover, 'image', f'cover.{index}', errors) if cover else None
        cleaned.append({'name': name, 'description': description, 'upload': upload})
    raise_if_errors(errors)

    names = [item['name'] for item in cleaned]
    repeated = sorted({name for name in names if names.count(name) > 1})
    if repeated:
        raise ConflictError('Duplicate category names in request', payload={'names': repeated})
    existing = Category.query.filter(Category.name.in_(names)).all()
    if existing:
        raise ConflictError('Category already exists',
                            payload={'categories': [{'id': c.id, 'name': c.name} for c in existing]})

    with_cover = [item for item in cleaned if item['upload']]
    paths = store_uploads([item['upload'] for item in with_cover], 'categories')
    for item, path in zip(with_cover, paths):
        item['cover'] = path

    categories = []
    for item in cleaned:
        category = Category(name=item['name'], description=item['description'], cover=item.get('cover'))
        db.session.add(category)
        categories.append(category)
    commit_or_discard(paths, action='create categories')

    invalidate_listing(CACHE_PREFIX)
    current_app.logger.info(f"Categories created: {[c.id for c in categories]}")

    body = {
        'message': 'Categories created successfully',
        'categories': [category_to_dict(c) for c in categories]
    }
    if len(categories) == 1:
        body['category'] = body['categories'][0]
    return jsonify(body), 201


@categories_bp.route('/category/<int:category_id>', methods=['GET'])
def show_category(category_id):
    category = get_or_404(Category, category_id, 'Category')
    return jsonify({
        'message': 'Category retrieved successfully',
        'category': category_to_dict(category)
    }), 200


@categories_bp.route('/category/<int:category_id>', methods=['PUT', 'PATCH'])
@login_required
def update_category(category_id):
    """Update fields and optionally replace the cover (store new, commit, delete old)"""
    category = get_or_404(Category, category_id, 'Category')

    data = get_payload()
    errors = {}
    name = clean_string(data, 'name', errors, required=request.method == 'PUT')
    description = clean_string(data, 'description', errors, max_length=500)
    cover_file = get_file('cover')
    upload = read_upload(cover_file, 'image', 'cover', errors) if cover_file else None
    raise_if_errors(errors)

    if name and Category.query.filter(Category.name == name, Category.id != category.id).first():
        raise ConflictError('Category name already taken', payload={'name': name})

    new_cover = store_upload(upload, 'categories') if upload else None

    if name:
        category.name = name
    if 'description' in data:
        category.description = description
    old_cover = category.cover
    if new_cover:
        category.cover = new_cover
    commit_or_discard([new_cover] if new_cover else [], action=f'update category {category_id}')

    if new_cover and old_cover:
        discard_asset(old_cover)

    invalidate_listing(CACHE_PREFIX)
    current_app.logger.info(f"Category {category_id} updated")
    return jsonify({
        'message': 'Category updated successfully',
        'category': category_to_dict(category)
    }), 200


@categories_bp.route('/category/<int:category_id>', methods=['DELETE'])
@login_required
def delete_category(category_id):
    """Delete a category that no project references any more"""
    current_app.logger.info(f"Category delete request for ID: {category_id}")
    category = get_or_404(Category, category_id, 'Category')

    project_count = retry(
        lambda: category.projects.count(),
        attempts=current_app.config['CATEGORY_DELETE_RETRIES'],
        delay=current_app.config['CATEGORY_DELETE_RETRY_DELAY'],
        on_retry=db.session.rollback,
        description=f"Project count for category {category_id}"
    )

    if project_count > 0:
        projects = [{'id': p.id, 'name': p.name}
                    for p in category.projects.with_entities(Project.id, Project.name).all()]
        current_app.logger.warning(
            f"Cannot delete category {category_id}: {project_count} associated projects")
        raise ReferentialIntegrityError(
            'Cannot delete category that has associated projects. Please remove projects first.',
            payload={'project_count': project_count, 'projects': projects}
        )

    if category.cover:
        discard_asset(category.cover)

    db.session.delete(category)
    db.session.commit()

    invalidate_listing(CACHE_PREFIX)
    current_app.logger.info(f"Category deleted successfully with ID: {category_id}")
    return jsonify({'message': 'Category deleted successfully'}), 200


@categories_bp.route('/category/<int:category_id>/projects', methods=['GET'])
def category_projects(category_id):
    """All projects of a category with every image resolved"""
    category = db.session.get(Category, category_id)
    if not category:
        raise NotFoundError('Category not found')

    projects = category.projects.order_by(Project.created_at.desc(), Project.id.desc()).all()
    if not projects:
        raise NotFoundError('No projects found for this category')

    return jsonify({
        'message': 'Projects retrieved successfully',
        'projects': [project_detail(p) for p in projects]
    }), 200


@categories_bp.route('/category/images', methods=['POST'])
def load_category_images():
    """Resolve covers for a batch of category ids"""
    errors = {}
    ids = clean_id_list(get_payload(), 'ids', errors)
    raise_if_errors(errors)

    categories = Category.query.filter(Category.id.in_(ids)).all()
    return jsonify({
        'covers': {str(c.id): resolve_asset(c.cover) for c in categories}
    }), 200
