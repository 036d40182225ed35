"""
Education Routes - Education timeline
"""

from flask import current_app, jsonify
from flask_login import login_required, current_user
from extensions import db
from models import Education
from utils.decorators import no_cache
from utils.helpers import get_or_404
from utils.presenters import education_to_dict
from utils.validation import get_payload, clean_string, clean_int, add_error, raise_if_errors
from . import education_bp


def _clean_education(data, partial=False):
    errors = {}
    cleaned = {
        'diploma': clean_string(data, 'diploma', errors, required=not partial),
        'school': clean_string(data, 'school', errors, required=not partial),
        'year_start': clean_int(data, 'year_start', errors, required=not partial, minimum=1900, maximum=2100),
        'year_end': clean_int(data, 'year_end', errors, minimum=1900, maximum=2100),
        'description': clean_string(data, 'description', errors, max_length=2000),
    }
    if cleaned['year_start'] and cleaned['year_end'] and cleaned['year_end'] < cleaned['year_start']:
        add_error(errors, 'year_end', 'The year end must be after or equal to the year start.')
    raise_if_errors(errors)
    if partial:
        return {key: value for key, value in cleaned.items() if key in data}
    return cleaned


@education_bp.route('/education', methods=['GET'])
@no_cache
def list_education():
    entries = Education.query.order_by(Education.year_end.desc(), Education.year_start.desc()).all()
    return jsonify({
        'message': 'Education retrieved successfully',
        'education': [education_to_dict(e) for e in entries]
    }), 200


@education_bp.route('/education/<int:education_id>', methods=['GET'])
def show_education(education_id):
    education = get_or_404(Education, education_id, 'Education')
    return jsonify({
        'message': 'Education retrieved successfully',
        'education': education_to_dict(education)
    }), 200


@education_bp.route('/education', methods=['POST'])
@login_required
@no_cache
def create_education():
    education = Education(user_id=current_user.id, **_clean_education(get_payload()))
    db.session.add(education)
    db.session.commit()
    current_app.logger.info(f"Education created: {education.id}")
    return jsonify({
        'message': 'Education created successfully',
        'education': education_to_dict(education)
    }), 201


@education_bp.route('/education/<int:education_id>', methods=['PUT', 'PATCH'])
@login_required
@no_cache
def update_education(education_id):
    education = get_or_404(Education, education_id, 'Education')
    for key, value in _clean_education(get_payload(), partial=True).items():
        setattr(education, key, value)
    db.session.commit()
    current_app.logger.info(f"Education {education_id} updated")
    return jsonify({
        'message': 'Education updated successfully',
        'education': education_to_dict(education)
    }), 200


@education_bp.route('/education/<int:education_id>', methods=['DELETE'])
@login_required
@no_cache
def delete_education(education_id):
    education = get_or_404(Education, education_id, 'Education')
    db.session.delete(education)
    db.session.commit()
    current_app.logger.info(f"Education {education_id} deleted")
    return jsonify({'message': 'Education deleted successfully'}), 200
