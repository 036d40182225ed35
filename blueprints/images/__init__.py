"""
Images Blueprint - Stored file serving
Handles: Streaming stored bytes, file metadata
"""

from flask import Blueprint

images_bp = Blueprint('images', __name__, url_prefix='/api')

from . import routes
