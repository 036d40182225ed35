"""
Image Routes - Stored file serving
"""

import io

from flask import jsonify, send_file
from utils.presenters import DATETIME_FORMAT
from utils.storage import get_storage
from . import images_bp


@images_bp.route('/images/<path:path>', methods=['GET'])
def serve_image(path):
    """Raw bytes of a stored file; paths are never rewritten so caching is safe"""
    stored = get_storage().get(path)
    response = send_file(io.BytesIO(stored.data), mimetype=stored.mime_type,
                         download_name=stored.filename, max_age=31536000)
    response.cache_control.immutable = True
    return response


@images_bp.route('/image-info/<path:path>', methods=['GET'])
def image_info(path):
    store = get_storage()
    info = store.info(path)
    return jsonify({
        'path': info.path,
        'filename': info.filename,
        'mime_type': info.mime_type,
        'size': info.size,
        'created_at': info.created_at.strftime(DATETIME_FORMAT) if info.created_at else None,
        'url': store.url(path)
    }), 200
