"""
Auth Blueprint - Authentication
Handles: Register, login and logout with bearer tokens
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/api')

from . import routes
