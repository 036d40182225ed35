"""
Auth Routes - Authentication and authorization
"""

from flask import current_app, jsonify
from flask_login import login_required, current_user
from models import User
from extensions import db
from utils.errors import ConflictError, PortfolioError
from utils.presenters import user_to_dict
from utils.security import hash_password, verify_password, issue_token, revoke_current_token
from utils.validation import get_payload, clean_string, clean_email, add_error, raise_if_errors
from . import auth_bp


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account; open only while no account exists or when explicitly enabled"""
    if not current_app.config.get('ALLOW_REGISTRATION') and User.query.first() is not None:
        raise PortfolioError('Registration is currently disabled.', status_code=403)

    data = get_payload()
    errors = {}
    name = clean_string(data, 'name', errors, required=True)
    email = clean_email(data, 'email', errors, required=True)
    password = clean_string(data, 'password', errors, required=True, max_length=None)
    if password and len(password) < 8:
        add_error(errors, 'password', 'The password must be at least 8 characters.')
    if password and data.get('password_confirmation') is not None and data.get('password_confirmation') != password:
        add_error(errors, 'password', 'The password confirmation does not match.')
    raise_if_errors(errors)

    if User.query.filter_by(email=email.lower()).first():
        raise ConflictError('An account with this email already exists.')

    user = User(name=name, email=email.lower(), password_hash=hash_password(password))
    db.session.add(user)
    db.session.commit()
    token = issue_token(user)

    current_app.logger.info(f"Account created: {user.email} (id {user.id})")
    return jsonify({
        'message': 'Account created successfully',
        'user': user_to_dict(user),
        'token': token
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Exchange credentials for a bearer token"""
    data = get_payload()
    errors = {}
    email = clean_email(data, 'email', errors, required=True)
    password = clean_string(data, 'password', errors, required=True, max_length=None)
    raise_if_errors(errors)

    user = User.query.filter_by(email=email.lower()).first()
    if not user or not verify_password(password, user.password_hash):
        current_app.logger.warning(f"Failed login for {email}")
        return jsonify({'message': 'Invalid credentials'}), 401

    token = issue_token(user)
    current_app.logger.info(f"User {user.email} logged in")
    return jsonify({
        'message': 'Login successful',
        'user': user_to_dict(user),
        'access_token': token,
        'token_type': 'Bearer'
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Revoke the token used for this request"""
    revoke_current_token()
    current_app.logger.info(f"User {current_user.email} logged out")
    return jsonify({'message': 'Logged out successfully'}), 200


@auth_bp.route('/user', methods=['GET'])
@login_required
def me():
    return jsonify({'user': user_to_dict(current_user)}), 200
