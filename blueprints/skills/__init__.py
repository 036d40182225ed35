"""
Skills Blueprint - Skills and their logos
Handles: Skill CRUD, batch create, bulk delete
"""

from flask import Blueprint

skills_bp = Blueprint('skills', __name__, url_prefix='/api')

from . import routes
