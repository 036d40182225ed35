"""
Skill Routes - Skills and their logos
Handles: Listing, batch create, update, delete, bulk delete, lazy logo loading
"""

from flask import current_app, jsonify
from flask_login import login_required, current_user
from extensions import db
from models import Skill
from utils.assets import store_upload, store_uploads, discard_asset, discard_assets, commit_or_discard
from utils.errors import ConflictError, NotFoundError, StorageError
from utils.helpers import paginate, get_or_404
from utils.presenters import skill_to_dict, pagination_to_dict, resolve_asset
from utils.storage import get_storage
from utils.validation import (
    get_payload, get_batch, get_file, read_upload, clean_string, clean_id_list, raise_if_errors
)
from . import skills_bp


def _same_logo(path, upload):
    """A stored logo matches an upload when original filename and size agree"""
    if not path or not upload:
        return not path and not upload
    try:
        info = get_storage().info(path)
    except (NotFoundError, StorageError):
        return False
    return info.filename == upload.filename and info.size == upload.size


def find_duplicate(name, upload):
    for skill in Skill.query.filter_by(name=name).all():
        if _same_logo(skill.logo, upload):
            return skill
    return None


@skills_bp.route('/skills', methods=['GET'])
def list_skills():
    query = Skill.query.order_by(Skill.created_at.desc(), Skill.id.desc())
    pagination = paginate(query, current_app.config['SKILLS_PER_PAGE'])
    return jsonify({
        'status': 'success',
        'skills': [skill_to_dict(s) for s in pagination.items],
        'pagination': pagination_to_dict(pagination)
    }), 200


@skills_bp.route('/skills', methods=['POST'])
@login_required
def create_skills():
    """Create one skill or a batch; a skill with the same name and logo is a conflict"""
    items = get_batch(('name',), 'logo')
    errors = {}
    cleaned = []

    if not items:
        errors['name'] = ['At least one skill name is required.']

    for index, (data, logo) in enumerate(items):
        name = clean_string(data, 'name', errors, required=True)
        upload = read_upload(logo, 'logo', f'logo.{index}', errors) if logo else None
        cleaned.append({'name': name, 'upload': upload})
    raise_if_errors(errors)

    for item in cleaned:
        existing = find_duplicate(item['name'], item['upload'])
        if existing:
            raise ConflictError('Skill already exists', payload={'skill': skill_to_dict(existing)})

    with_logo = [item for item in cleaned if item['upload']]
    paths = store_uploads([item['upload'] for item in with_logo], 'skills')
    for item, path in zip(with_logo, paths):
        item['logo'] = path

    skills = []
    for item in cleaned:
        skill = Skill(name=item['name'], logo=item.get('logo'), user_id=current_user.id)
        db.session.add(skill)
        skills.append(skill)
    commit_or_discard(paths, action='create skills')

    current_app.logger.info(f"Skills created: {[s.id for s in skills]}")
    body = {
        'message': 'Skill created successfully',
        'skills': [skill_to_dict(s) for s in skills]
    }
    if len(skills) == 1:
        body['skill'] = body['skills'][0]
    return jsonify(body), 201


@skills_bp.route('/skills/<int:skill_id>', methods=['GET'])
def show_skill(skill_id):
    skill = get_or_404(Skill, skill_id, 'Skill')
    return jsonify({
        'message': 'Skill retrieved successfully',
        'skill': skill_to_dict(skill)
    }), 200


@skills_bp.route('/skills/<int:skill_id>', methods=['PUT', 'PATCH'])
@login_required
def update_skill(skill_id):
    skill = get_or_404(Skill, skill_id, 'Skill')

    data = get_payload()
    errors = {}
    name = clean_string(data, 'name', errors)
    logo_file = get_file('logo')
    upload = read_upload(logo_file, 'logo', 'logo', errors) if logo_file else None
    raise_if_errors(errors)

    new_logo = store_upload(upload, 'skills') if upload else None

    if name:
        skill.name = name
    old_logo = skill.logo
    if new_logo:
        skill.logo = new_logo
    commit_or_discard([new_logo] if new_logo else [], action=f'update skill {skill_id}')

    if new_logo and old_logo:
        discard_asset(old_logo)

    current_app.logger.info(f"Skill {skill_id} updated")
    return jsonify({
        'message': 'Skill updated successfully',
        'skill': skill_to_dict(skill)
    }), 200


@skills_bp.route('/skills/<int:skill_id>', methods=['DELETE'])
@login_required
def delete_skill(skill_id):
    skill = get_or_404(Skill, skill_id, 'Skill')
    discard_asset(skill.logo)
    db.session.delete(skill)
    db.session.commit()
    current_app.logger.info(f"Skill {skill_id} deleted")
    return jsonify({'message': 'Skill deleted successfully'}), 200


@skills_bp.route('/skills/bulk-delete', methods=['POST'])
@login_required
def bulk_delete_skills():
    errors = {}
    ids = clean_id_list(get_payload(), 'ids', errors)
    raise_if_errors(errors)

    skills = Skill.query.filter(Skill.id.in_(ids)).all()
    discard_assets([s.logo for s in skills if s.logo])
    for skill in skills:
        db.session.delete(skill)
    db.session.commit()

    deleted = sorted(s.id for s in skills)
    current_app.logger.info(f"Skills bulk deleted: {deleted}")
    return jsonify({
        'message': f'{len(deleted)} skills deleted successfully',
        'deleted': deleted,
        'not_found': sorted(set(ids) - set(deleted))
    }), 200


@skills_bp.route('/skills/logos', methods=['POST'])
def load_skill_logos():
    """Resolve logos for a batch of skill ids"""
    errors = {}
    ids = clean_id_list(get_payload(), 'ids', errors)
    raise_if_errors(errors)

    skills = Skill.query.filter(Skill.id.in_(ids)).all()
    return jsonify({
        'logos': {str(s.id): resolve_asset(s.logo) for s in skills}
    }), 200
