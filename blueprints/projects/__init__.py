"""
Projects Blueprint - Portfolio projects
Handles: Project CRUD, project images, cover selection
"""

from flask import Blueprint

projects_bp = Blueprint('projects', __name__, url_prefix='/api')

from . import routes
