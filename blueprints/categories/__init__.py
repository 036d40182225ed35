"""
Categories Blueprint - Project categories
Handles: Category CRUD, batch create, delete guard, projects per category
"""

from flask import Blueprint

categories_bp = Blueprint('categories', __name__, url_prefix='/api')

from . import routes
