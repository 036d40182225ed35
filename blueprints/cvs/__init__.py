"""
CVs Blueprint - Downloadable CVs
Handles: CV CRUD with French and English files, active CV, download
"""

from flask import Blueprint

cvs_bp = Blueprint('cvs', __name__, url_prefix='/api')

from . import routes
