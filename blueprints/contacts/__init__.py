"""
Contacts Blueprint - Contact form
Handles: Public contact form, admin inbox
"""

from flask import Blueprint

contacts_bp = Blueprint('contacts', __name__, url_prefix='/api')

from . import routes
