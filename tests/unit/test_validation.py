import io

import pytest

from utils.errors import ValidationError
from utils.validation import (
    get_batch, get_file, read_upload, clean_string, clean_int, clean_bool,
    clean_email, clean_id_list, raise_if_errors
)


def test_clean_string_required_and_length():
    errors = {}
    assert clean_string({'name': '  Web  '}, 'name', errors, required=True) == 'Web'
    assert clean_string({'name': ' '}, 'name', errors, required=True) is None
    assert clean_string({'bio': 'x' * 11}, 'bio', errors, max_length=10) is None
    assert set(errors) == {'name', 'bio'}


def test_clean_int_bounds():
    errors = {}
    assert clean_int({'year': '2020'}, 'year', errors, minimum=1900) == 2020
    assert clean_int({'year': 'soon'}, 'year', errors) is None
    assert clean_int({'index': -1}, 'index', errors, minimum=0) is None
    assert set(errors) == {'year', 'index'}


def test_clean_bool_accepts_form_values():
    assert clean_bool({'flag': 'true'}, 'flag') is True
    assert clean_bool({'flag': '0'}, 'flag') is False
    assert clean_bool({}, 'flag', default=True) is True


def test_clean_email():
    errors = {}
    assert clean_email({'email': 'me@example.com'}, 'email', errors) == 'me@example.com'
    assert clean_email({'email': 'not-an-email'}, 'email', errors) is None
    assert 'email' in errors


def test_clean_id_list():
    errors = {}
    assert clean_id_list({'ids': ['1', 2]}, 'ids', errors) == [1, 2]
    assert clean_id_list({'ids': []}, 'ids', errors) == []
    assert errors['ids']


def test_raise_if_errors_carries_field_map():
    with pytest.raises(ValidationError) as excinfo:
        raise_if_errors({'name': ['The name field is required.']})
    assert excinfo.value.status_code == 422
    assert excinfo.value.to_dict()['errors'] == {'name': ['The name field is required.']}


def test_get_batch_from_json_list(app):
    with app.test_request_context(json=[{'name': 'Web'}, {'name': 'Mobile'}]):
        items = get_batch(('name', 'description'), 'cover')
    assert [data['name'] for data, _ in items] == ['Web', 'Mobile']
    assert all(file is None for _, file in items)


def test_get_batch_from_parallel_form_fields(app):
    data = {
        'name[]': ['Web', 'Mobile'],
        'description[]': ['Sites'],
        'cover[]': [(io.BytesIO(b'png'), 'web.png')]
    }
    with app.test_request_context(method='POST', data=data, content_type='multipart/form-data'):
        items = get_batch(('name', 'description'), 'cover')
        assert items[0][0] == {'name': 'Web', 'description': 'Sites'}
        assert items[0][1].filename == 'web.png'
        assert items[1][0] == {'name': 'Mobile', 'description': None}
        assert items[1][1] is None


def test_read_upload_checks_extension_and_size(app):
    app.config['MAX_FILE_SIZE'] = dict(app.config['MAX_FILE_SIZE'], image=4)
    data = {
        'good': (io.BytesIO(b'abc'), 'a.png'),
        'exe': (io.BytesIO(b'abc'), 'a.exe'),
        'big': (io.BytesIO(b'abcdef'), 'a.png'),
    }
    with app.test_request_context(method='POST', data=data, content_type='multipart/form-data'):
        errors = {}
        upload = read_upload(get_file('good'), 'image', 'good', errors)
        assert upload.data == b'abc' and upload.size == 3
        assert read_upload(get_file('exe'), 'image', 'exe', errors) is None
        assert read_upload(get_file('big'), 'image', 'big', errors) is None
        assert set(errors) == {'exe', 'big'}


def test_read_upload_allows_svg_only_for_logos(app):
    data = {'logo': (io.BytesIO(b'<svg/>'), 'logo.svg')}
    with app.test_request_context(method='POST', data=data, content_type='multipart/form-data'):
        errors = {}
        assert read_upload(get_file('logo'), 'logo', 'logo', errors) is not None
        assert read_upload(get_file('logo'), 'image', 'cover', errors) is None
        assert 'cover' in errors
