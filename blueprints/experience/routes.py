"""
Experience Routes - Work experience timeline
"""

from flask import current_app, jsonify
from flask_login import login_required, current_user
from extensions import db
from models import Experience
from utils.decorators import no_cache
from utils.helpers import get_or_404
from utils.presenters import experience_to_dict
from utils.validation import (
    get_payload, clean_string, clean_int, clean_bool, add_error, raise_if_errors
)
from . import experience_bp


def _clean_experience(data, partial=False):
    errors = {}
    cleaned = {
        'position': clean_string(data, 'position', errors, required=not partial),
        'company': clean_string(data, 'company', errors, required=not partial),
        'location': clean_string(data, 'location', errors),
        'year_start': clean_int(data, 'year_start', errors, required=not partial, minimum=1900, maximum=2100),
        'year_end': clean_int(data, 'year_end', errors, minimum=1900, maximum=2100),
        'currently_working': clean_bool(data, 'currently_working'),
        'description': clean_string(data, 'description', errors, max_length=2000),
    }
    if cleaned['year_start'] and cleaned['year_end'] and cleaned['year_end'] < cleaned['year_start']:
        add_error(errors, 'year_end', 'The year end must be after or equal to the year start.')
    raise_if_errors(errors)

    # an ongoing position has no end year
    if cleaned['currently_working']:
        cleaned['year_end'] = None
    if partial:
        return {key: value for key, value in cleaned.items()
                if key in data or (key == 'year_end' and cleaned['currently_working'])}
    return cleaned


@experience_bp.route('/experience', methods=['GET'])
@no_cache
def list_experiences():
    entries = (Experience.query
               .order_by(Experience.year_end.desc(), Experience.year_start.desc())
               .all())
    return jsonify({
        'message': 'Experiences retrieved successfully',
        'experiences': [experience_to_dict(e) for e in entries]
    }), 200


@experience_bp.route('/experience/<int:experience_id>', methods=['GET'])
def show_experience(experience_id):
    experience = get_or_404(Experience, experience_id, 'Experience')
    return jsonify({
        'message': 'Experience retrieved successfully',
        'experience': experience_to_dict(experience)
    }), 200


@experience_bp.route('/experience', methods=['POST'])
@login_required
@no_cache
def create_experience():
    experience = Experience(user_id=current_user.id, **_clean_experience(get_payload()))
    db.session.add(experience)
    db.session.commit()
    current_app.logger.info(f"Experience created: {experience.id}")
    return jsonify({
        'message': 'Experience created successfully',
        'experience': experience_to_dict(experience)
    }), 201


@experience_bp.route('/experience/<int:experience_id>', methods=['PUT', 'PATCH'])
@login_required
@no_cache
def update_experience(experience_id):
    experience = get_or_404(Experience, experience_id, 'Experience')
    for key, value in _clean_experience(get_payload(), partial=True).items():
        setattr(experience, key, value)
    db.session.commit()
    current_app.logger.info(f"Experience {experience_id} updated")
    return jsonify({
        'message': 'Experience updated successfully',
        'experience': experience_to_dict(experience)
    }), 200


@experience_bp.route('/experience/<int:experience_id>', methods=['DELETE'])
@login_required
@no_cache
def delete_experience(experience_id):
    experience = get_or_404(Experience, experience_id, 'Experience')
    db.session.delete(experience)
    db.session.commit()
    current_app.logger.info(f"Experience {experience_id} deleted")
    return jsonify({'message': 'Experience deleted successfully'}), 200
