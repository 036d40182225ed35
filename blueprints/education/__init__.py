"""
Education Blueprint - Education timeline
Handles: Education CRUD
"""

from flask import Blueprint

education_bp = Blueprint('education', __name__, url_prefix='/api')

from . import routes
