"""
CV Routes - Downloadable CVs
Handles: CV CRUD, active CV, download of the French or English file
"""

import io
from datetime import datetime

from flask import current_app, jsonify, send_file
from flask_login import login_required, current_user
from extensions import db
from models import Cv, User
from utils.assets import store_upload, discard_asset, discard_assets, commit_or_discard
from utils.errors import ConflictError, NotFoundError, StorageError
from utils.helpers import get_or_404
from utils.presenters import cv_to_dict
from utils.storage import get_storage
from utils.validation import get_payload, get_file, read_upload, clean_int, add_error, raise_if_errors
from . import cvs_bp

LANGUAGES = ('fr', 'en')


def _read_slots(errors, required=False):
    uploads = {}
    for language in LANGUAGES:
        file = get_file(f'cv_{language}')
        if file:
            upload = read_upload(file, 'document', f'cv_{language}', errors)
            if upload:
                uploads[language] = upload
    if required and not uploads and not errors:
        add_error(errors, 'cv_fr', 'At least one CV file is required.')
    return uploads


def _store_slots(uploads):
    """Store every uploaded slot; a failure drops the slots stored before it"""
    paths = {}
    try:
        for language, upload in uploads.items():
            paths[language] = store_upload(upload, 'cvs')
    except StorageError:
        discard_assets(paths.values())
        raise
    return paths


@cvs_bp.route('/cvs', methods=['GET'])
def list_cvs():
    cvs = Cv.query.order_by(Cv.created_at.desc(), Cv.id.desc()).all()
    return jsonify({
        'message': 'CVs retrieved successfully',
        'cvs': [cv_to_dict(cv) for cv in cvs]
    }), 200


@cvs_bp.route('/cv/active', methods=['GET'])
def active_cv():
    """Most recent CV"""
    cv = Cv.query.order_by(Cv.created_at.desc(), Cv.id.desc()).first()
    if not cv:
        raise NotFoundError('No CV available')
    return jsonify({
        'message': 'CV retrieved successfully',
        'cv': cv_to_dict(cv)
    }), 200


@cvs_bp.route('/cvs/<int:cv_id>', methods=['GET'])
def show_cv(cv_id):
    cv = get_or_404(Cv, cv_id, 'CV')
    return jsonify({
        'message': 'CV retrieved successfully',
        'cv': cv_to_dict(cv)
    }), 200


@cvs_bp.route('/cvs/<int:cv_id>/download/<language>', methods=['GET'])
def download_cv(cv_id, language):
    if language not in LANGUAGES:
        raise NotFoundError('Unknown CV language', payload={'language': language})
    cv = get_or_404(Cv, cv_id, 'CV')
    path = getattr(cv, f'cv_{language}_path')
    if not path:
        raise NotFoundError(f'No {language} CV file')

    stored = get_storage().get(path)
    return send_file(io.BytesIO(stored.data), mimetype=stored.mime_type,
                     as_attachment=True, download_name=stored.filename)


@cvs_bp.route('/cvs', methods=['POST'])
@login_required
def create_cv():
    """Create the CV of a user (the caller by default); one CV per user"""
    data = get_payload()
    errors = {}
    user_id = clean_int(data, 'user_id', errors) or current_user.id
    if db.session.get(User, user_id) is None:
        add_error(errors, 'user_id', 'The selected user is invalid.')
    uploads = _read_slots(errors, required=True)
    raise_if_errors(errors)

    existing = Cv.query.filter_by(user_id=user_id).first()
    if existing:
        raise ConflictError('This user already has a CV', payload={'cv_id': existing.id})

    paths = _store_slots(uploads)
    now = datetime.utcnow()
    cv = Cv(user_id=user_id)
    for language, path in paths.items():
        setattr(cv, f'cv_{language}_path', path)
        setattr(cv, f'cv_{language}_uploaded_at', now)
    db.session.add(cv)
    commit_or_discard(list(paths.values()), action='create CV')

    current_app.logger.info(f"CV created: {cv.id} for user {user_id} ({', '.join(paths)})")
    return jsonify({
        'message': 'CV created successfully',
        'cv': cv_to_dict(cv)
    }), 201


@cvs_bp.route('/cvs/<int:cv_id>', methods=['PUT', 'PATCH'])
@login_required
def update_cv(cv_id):
    """Replace the uploaded slots, others are left as they are"""
    cv = get_or_404(Cv, cv_id, 'CV')

    errors = {}
    uploads = _read_slots(errors)
    raise_if_errors(errors)

    paths = _store_slots(uploads)
    now = datetime.utcnow()
    old_paths = []
    for language, path in paths.items():
        old_path = getattr(cv, f'cv_{language}_path')
        if old_path:
            old_paths.append(old_path)
        setattr(cv, f'cv_{language}_path', path)
        setattr(cv, f'cv_{language}_uploaded_at', now)
    commit_or_discard(list(paths.values()), action=f'update CV {cv_id}')

    discard_assets(old_paths)

    current_app.logger.info(f"CV {cv_id} updated ({', '.join(paths) or 'no files'})")
    return jsonify({
        'message': 'CV updated successfully',
        'cv': cv_to_dict(cv)
    }), 200


@cvs_bp.route('/cvs/<int:cv_id>', methods=['DELETE'])
@login_required
def delete_cv(cv_id):
    cv = get_or_404(Cv, cv_id, 'CV')
    for language in LANGUAGES:
        discard_asset(getattr(cv, f'cv_{language}_path'))
    db.session.delete(cv)
    db.session.commit()
    current_app.logger.info(f"CV {cv_id} deleted")
    return jsonify({'message': 'CV deleted successfully'}), 200
