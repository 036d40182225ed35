"""
Validation Module - Request input and upload checks

Every check runs before the binary store or the database is touched.
Field problems are collected into a {field: [messages]} map and raised
together as a single ValidationError.
"""

import os
from collections import namedtuple

from flask import current_app, request
from werkzeug.datastructures import FileStorage

from .errors import ValidationError


Upload = namedtuple('Upload', ['filename', 'mime_type', 'data', 'size'])


def add_error(errors, field, message):
    errors.setdefault(field, []).append(message)


def raise_if_errors(errors, message='The given data was invalid.'):
    if errors:
        raise ValidationError(message, errors=errors)


def get_payload():
    """Form fields for multipart requests, JSON body otherwise"""
    if request.mimetype in ('multipart/form-data', 'application/x-www-form-urlencoded'):
        return request.form.to_dict()
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def get_list(field):
    """Repeated form field, accepting both `field` and `field[]`"""
    values = request.form.getlist(f'{field}[]') or request.form.getlist(field)
    if not values:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict) and isinstance(payload.get(field), list):
            values = payload[field]
    return values


def get_batch(text_fields, file_field):
    """Items sent in one call: a JSON object, a JSON array, or parallel form fields.

    Returns a list of (data, file) pairs; files only travel in multipart
    requests and are aligned with the text fields by position.
    """
    payload = request.get_json(silent=True)
    if isinstance(payload, list):
        return [(item if isinstance(item, dict) else {}, None) for item in payload]
    if isinstance(payload, dict):
        return [(payload, None)]

    columns = {field: get_list(field) for field in text_fields}
    files = request.files.getlist(f'{file_field}[]') or request.files.getlist(file_field)
    items = []
    for index in range(len(columns[text_fields[0]])):
        data = {field: (values[index] if index < len(values) else None) for field, values in columns.items()}
        file = files[index] if index < len(files) else None
        items.append((data, file if isinstance(file, FileStorage) and file.filename else None))
    return items


def get_files(field):
    files = request.files.getlist(f'{field}[]') or request.files.getlist(field)
    return [f for f in files if isinstance(f, FileStorage) and f.filename]


def get_file(field):
    files = get_files(field)
    return files[0] if files else None


def file_extension(filename):
    return os.path.splitext(filename or '')[1].lstrip('.').lower()


def read_upload(file, asset_class, field, errors):
    """Check extension and size against the asset class rules and read the bytes.

    Returns an Upload, or None after recording the problem in `errors`.
    """
    allowed = current_app.config['ALLOWED_EXTENSIONS'][asset_class]
    max_size = current_app.config['MAX_FILE_SIZE'][asset_class]

    if file_extension(file.filename) not in allowed:
        add_error(errors, field, f"The file must be of type: {', '.join(sorted(allowed))}.")
        return None

    data = file.read()
    if not data:
        add_error(errors, field, 'The file is empty.')
        return None
    if len(data) > max_size:
        add_error(errors, field, f"The file may not be greater than {max_size // 1024} kilobytes.")
        return None

    return Upload(file.filename, file.mimetype or None, data, len(data))


def clean_string(data, field, errors, required=False, max_length=255):
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            add_error(errors, field, f'The {field} field is required.')
        return None
    if not isinstance(value, str):
        add_error(errors, field, f'The {field} must be a string.')
        return None
    value = value.strip()
    if max_length and len(value) > max_length:
        add_error(errors, field, f'The {field} may not be greater than {max_length} characters.')
        return None
    return value


def clean_int(data, field, errors, required=False, minimum=None, maximum=None):
    value = data.get(field)
    if value is None or value == '':
        if required:
            add_error(errors, field, f'The {field} field is required.')
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        add_error(errors, field, f'The {field} must be an integer.')
        return None
    if minimum is not None and value < minimum:
        add_error(errors, field, f'The {field} must be at least {minimum}.')
        return None
    if maximum is not None and value > maximum:
        add_error(errors, field, f'The {field} may not be greater than {maximum}.')
        return None
    return value


def clean_bool(data, field, default=False):
    value = data.get(field)
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def clean_email(data, field, errors, required=False):
    value = clean_string(data, field, errors, required=required)
    if value and ('@' not in value or '.' not in value.rsplit('@', 1)[-1]):
        add_error(errors, field, f'The {field} must be a valid email address.')
        return None
    return value


def clean_id_list(data, field, errors):
    values = data.get(field)
    if not isinstance(values, list) or not values:
        add_error(errors, field, f'The {field} field must be a non-empty list.')
        return []
    ids = []
    for value in values:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            add_error(errors, field, f'The {field} must contain integers only.')
            return []
    return ids


__all__ = [
    'Upload',
    'add_error',
    'raise_if_errors',
    'get_payload',
    'get_list',
    'get_batch',
    'get_files',
    'get_file',
    'read_upload',
    'clean_string',
    'clean_int',
    'clean_bool',
    'clean_email',
    'clean_id_list'
]
