import pytest

from extensions import db
from models import Category, ImageStorage, Project
from utils.storage import get_storage, init_storage


@pytest.fixture
def category_id(app):
    with app.app_context():
        category = Category(name='Web')
        db.session.add(category)
        db.session.commit()
        return category.id


def _create_project(client, auth_headers, category_id, files, **fields):
    data = {'name': 'Portfolio', 'description': 'My site', 'category_id': str(category_id)}
    data.update(fields)
    data['images[]'] = files
    return client.post('/api/projects', data=data, headers=auth_headers,
                       content_type='multipart/form-data')


def test_create_requires_authentication(client, category_id):
    response = client.post('/api/projects', json={'name': 'x'})
    assert response.status_code == 401


def test_create_project_with_images(client, auth_headers, category_id, upload):
    response = _create_project(client, auth_headers, category_id,
                               [upload(b'a', 'a.png'), upload(b'b', 'b.png')])
    assert response.status_code == 201
    project = response.get_json()['project']
    assert [image['is_cover'] for image in project['images']] == [True, False]
    assert project['cover_image'].startswith('data:image/png;base64,')
    assert project['category']['name'] == 'Web'


def test_create_project_validation(client, auth_headers, upload):
    response = _create_project(client, auth_headers, 999, [upload(b'x', 'x.exe')])
    assert response.status_code == 422
    errors = response.get_json()['errors']
    assert 'category_id' in errors
    assert 'images.0' in errors


def test_duplicate_project_is_conflict(client, auth_headers, category_id, upload):
    assert _create_project(client, auth_headers, category_id, [upload()]).status_code == 201
    response = _create_project(client, auth_headers, category_id, [upload()])
    assert response.status_code == 409


def test_cover_fallback_reapplies_after_mutation(client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id,
                              [upload(b'image A', 'a.png'), upload(b'image B', 'b.png')]).get_json()['project']
    project_id = created['id']
    image_a, image_b = created['images']

    summary = client.get('/api/projects').get_json()['projects'][0]
    assert summary['cover_image_id'] == image_a['id']

    response = client.put(f'/api/projects/{project_id}/cover', json={'image_id': image_b['id']},
                          headers=auth_headers)
    assert response.status_code == 200
    summary = client.get('/api/projects').get_json()['projects'][0]
    assert summary['cover_image_id'] == image_b['id']

    response = client.delete(f"/api/projects/{project_id}/images/{image_b['id']}", headers=auth_headers)
    assert response.status_code == 200
    summary = client.get('/api/projects').get_json()['projects'][0]
    assert summary['cover_image_id'] == image_a['id']
    assert summary['images_count'] == 1


def test_set_cover_with_foreign_image_is_not_found(client, auth_headers, category_id, upload):
    first = _create_project(client, auth_headers, category_id, [upload()]).get_json()['project']
    second = _create_project(client, auth_headers, category_id, [upload()],
                             name='Other').get_json()['project']

    response = client.put(f"/api/projects/{first['id']}/cover",
                          json={'image_id': second['images'][0]['id']}, headers=auth_headers)
    assert response.status_code == 404


def test_update_replaces_images_after_commit(app, client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id,
                              [upload(b'old', 'old.png')]).get_json()['project']
    old_path = created['images'][0]['path']

    response = client.put(f"/api/projects/{created['id']}",
                          data={'images[]': [upload(b'new 1', 'n1.png'), upload(b'new 2', 'n2.png')]},
                          headers=auth_headers, content_type='multipart/form-data')
    assert response.status_code == 200
    new_paths = [image['path'] for image in response.get_json()['project']['images']]

    with app.app_context():
        store = get_storage()
        assert not store.exists(old_path)
        assert all(store.exists(path) for path in new_paths)


def test_failed_upload_keeps_previous_images(app, client, auth_headers, category_id, upload, flaky_store):
    created = _create_project(client, auth_headers, category_id,
                              [upload(b'old', 'old.png')]).get_json()['project']
    old_path = created['images'][0]['path']
    init_storage(app, flaky_store(fail_on=2))

    response = client.put(f"/api/projects/{created['id']}",
                          data={'images[]': [upload(b'new 1', 'n1.png'), upload(b'new 2', 'n2.png')]},
                          headers=auth_headers, content_type='multipart/form-data')
    assert response.status_code == 503

    with app.app_context():
        project = db.session.get(Project, created['id'])
        assert [image.path for image in project.images] == [old_path]
        assert ImageStorage.query.count() == 1


def test_delete_project_removes_binaries(app, client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id, [upload()]).get_json()['project']

    response = client.delete(f"/api/projects/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"/api/projects/{created['id']}").status_code == 404
    with app.app_context():
        assert ImageStorage.query.count() == 0


def test_bulk_delete_reports_missing_ids(client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id, [upload()]).get_json()['project']

    response = client.post('/api/projects/bulk-delete', json={'ids': [created['id'], 999]},
                           headers=auth_headers)
    body = response.get_json()
    assert response.status_code == 200
    assert body['deleted'] == [created['id']]
    assert body['not_found'] == [999]


def test_lazy_cover_loading(client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id, [upload()]).get_json()['project']

    response = client.post('/api/projects/images', json={'ids': [created['id']]})
    assert response.status_code == 200
    assert response.get_json()['covers'][str(created['id'])] == created['cover_image']


def test_broken_reference_renders_without_cover(app, client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id, [upload()]).get_json()['project']
    with app.app_context():
        get_storage().delete(created['images'][0]['path'])

    response = client.get(f"/api/projects/{created['id']}")
    assert response.status_code == 200
    assert response.get_json()['project']['cover_image'] is None


def test_s3_backend_serves_urls(s3_app, client, auth_headers, category_id, upload):
    created = _create_project(client, auth_headers, category_id, [upload()]).get_json()['project']
    assert created['cover_image'].startswith('https://test-bucket.s3.test/projects/')


def test_bulk_delete_survives_failing_binary_delete(app, client, auth_headers, category_id, upload, flaky_store):
    first = _create_project(client, auth_headers, category_id, [upload(b'a', 'a.png')]).get_json()['project']
    second = _create_project(client, auth_headers, category_id, [upload(b'b', 'b.png')]).get_json()['project']
    init_storage(app, flaky_store(fail_delete_on=2))

    response = client.post('/api/projects/bulk-delete', json={'ids': [first['id'], second['id']]},
                           headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()['deleted'] == sorted([first['id'], second['id']])

    with app.app_context():
        assert Project.query.count() == 0
        assert [image.path for image in ImageStorage.query.all()] == [second['images'][0]['path']]
