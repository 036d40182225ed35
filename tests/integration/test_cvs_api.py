from werkzeug.http import parse_options_header

from extensions import db
from models import Cv
from utils.storage import get_storage


def _pdf(upload, content=b'%PDF-1.4 resume', filename='resume.pdf'):
    return upload(content, filename)


def _create(client, auth_headers, **files):
    return client.post('/api/cvs', data=files, headers=auth_headers, content_type='multipart/form-data')


def test_create_cv_with_both_languages(client, auth_headers, upload):
    response = _create(client, auth_headers, cv_fr=_pdf(upload, filename='cv-fr.pdf'),
                       cv_en=_pdf(upload, filename='cv-en.pdf'))
    assert response.status_code == 201
    cv = response.get_json()['cv']
    assert cv['fr']['filename'] == 'cv-fr.pdf'
    assert cv['fr']['mime_type'] == 'application/pdf'
    assert cv['en']['download_url'].endswith(f"/api/cvs/{cv['id']}/download/en")


def test_one_cv_per_user(client, auth_headers, upload):
    assert _create(client, auth_headers, cv_fr=_pdf(upload)).status_code == 201
    assert _create(client, auth_headers, cv_fr=_pdf(upload)).status_code == 409


def test_create_requires_a_document(client, auth_headers, upload):
    response = _create(client, auth_headers, cv_fr=upload(b'png', 'photo.png'))
    assert response.status_code == 422
    assert 'cv_fr' in response.get_json()['errors']


def test_download_is_an_attachment(client, auth_headers, upload):
    cv = _create(client, auth_headers, cv_en=_pdf(upload, b'%PDF english')).get_json()['cv']

    response = client.get(f"/api/cvs/{cv['id']}/download/en")
    assert response.status_code == 200
    assert response.data == b'%PDF english'
    assert response.mimetype == 'application/pdf'
    assert parse_options_header(response.headers['Content-Disposition']) == ('attachment', {'filename': 'resume.pdf'})

    assert client.get(f"/api/cvs/{cv['id']}/download/fr").status_code == 404
    assert client.get(f"/api/cvs/{cv['id']}/download/de").status_code == 404


def test_active_cv(client, auth_headers, upload):
    assert client.get('/api/cv/active').status_code == 404
    cv = _create(client, auth_headers, cv_fr=_pdf(upload)).get_json()['cv']
    assert client.get('/api/cv/active').get_json()['cv']['id'] == cv['id']


def test_update_replaces_only_uploaded_slot(app, client, auth_headers, upload):
    cv = _create(client, auth_headers, cv_fr=_pdf(upload), cv_en=_pdf(upload)).get_json()['cv']
    with app.app_context():
        before = db.session.get(Cv, cv['id'])
        old_fr, old_en = before.cv_fr_path, before.cv_en_path

    response = client.put(f"/api/cvs/{cv['id']}", data={'cv_fr': _pdf(upload, filename='nouveau.pdf')},
                          headers=auth_headers, content_type='multipart/form-data')
    assert response.status_code == 200
    assert response.get_json()['cv']['fr']['filename'] == 'nouveau.pdf'

    with app.app_context():
        after = db.session.get(Cv, cv['id'])
        store = get_storage()
        assert after.cv_en_path == old_en
        assert after.cv_fr_path != old_fr
        assert not store.exists(old_fr)
        assert store.exists(after.cv_fr_path)


def test_delete_removes_both_files(app, client, auth_headers, upload):
    cv = _create(client, auth_headers, cv_fr=_pdf(upload), cv_en=_pdf(upload)).get_json()['cv']
    with app.app_context():
        record = db.session.get(Cv, cv['id'])
        paths = [record.cv_fr_path, record.cv_en_path]

    assert client.delete(f"/api/cvs/{cv['id']}", headers=auth_headers).status_code == 200
    with app.app_context():
        assert not any(get_storage().exists(path) for path in paths)
    assert client.get(f"/api/cvs/{cv['id']}").status_code == 404


def test_download_non_ascii_filename(client, auth_headers, upload):
    cv = _create(client, auth_headers, cv_fr=_pdf(upload, filename='résumé.pdf')).get_json()['cv']

    response = client.get(f"/api/cvs/{cv['id']}/download/fr")
    disposition = response.headers['Content-Disposition']
    assert disposition.startswith('attachment')
    assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in disposition
    disposition.encode('latin-1')
