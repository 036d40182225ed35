"""
Experience Blueprint - Work experience timeline
Handles: Experience CRUD
"""

from flask import Blueprint

experience_bp = Blueprint('experience', __name__, url_prefix='/api')

from . import routes
