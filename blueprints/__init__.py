"""
Blueprints Package - Modular application structure
Each blueprint handles a specific resource of the portfolio API
"""

__all__ = [
    'auth',
    'categories',
    'projects',
    'skills',
    'education',
    'experience',
    'cvs',
    'contacts',
    'images'
]
