from extensions import db
from models import Category, Project, ProjectImage
from migrations.check_storage import check_storage
from migrations.migrate_files_to_store import migrate_files
from migrations.set_default_covers import set_default_covers
from utils.storage import get_storage


def test_set_default_covers_flags_first_image_only_when_unset(app):
    with app.app_context():
        category = Category(name='Web')
        implicit = Project(name='A', description='a', category=category)
        implicit.images.extend([ProjectImage(path='projects/1.png'), ProjectImage(path='projects/2.png')])
        explicit = Project(name='B', description='b', category=category)
        explicit.images.extend([ProjectImage(path='projects/3.png'), ProjectImage(path='projects/4.png', is_cover=True)])
        empty = Project(name='C', description='c', category=category)
        db.session.add_all([implicit, explicit, empty])
        db.session.commit()

        assert set_default_covers() == 1
        assert [image.is_cover for image in implicit.images] == [True, False]
        assert [image.is_cover for image in explicit.images] == [False, True]


def test_check_storage_s3_backend(s3_app):
    with s3_app.app_context():
        assert check_storage() is True


def test_check_storage_database_backend(app):
    with app.app_context():
        assert check_storage() is True


def test_migrate_files_imports_legacy_uploads(app, tmp_path):
    (tmp_path / 'category_covers').mkdir()
    (tmp_path / 'category_covers' / 'web.png').write_bytes(b'legacy bytes')

    with app.app_context():
        kept = get_storage().put(b'already stored', 'mobile.png', 'category_covers')
        db.session.add_all([
            Category(name='Web', cover='category_covers/web.png'),
            Category(name='Mobile', cover=kept),
            Category(name='Desktop', cover='category_covers/missing.png'),
        ])
        db.session.commit()

        stats = migrate_files(str(tmp_path))

        assert stats == {'migrated': 1, 'skipped': 1, 'errors': 1}
        web = Category.query.filter_by(name='Web').one()
        assert web.cover != 'category_covers/web.png'
        assert get_storage().get(web.cover).data == b'legacy bytes'
