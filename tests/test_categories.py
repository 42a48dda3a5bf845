"""Tests for the category routes."""

from intrafiles import db
from intrafiles.models import ActivityLog, Category, FileItem


class TestCategoryCrud:
    """Tests for create, read and update."""

    def test_create_category(self, client, app, auth_headers, user):
        """Test creating a category records the creator and logs it."""
        response = client.post('/api/categories', headers=auth_headers, json={
            'name': '  Finance ', 'description': 'Budgets', 'color': '#ff0000',
        })

        assert response.status_code == 201
        created = response.get_json()['category']
        assert created['name'] == 'Finance'
        assert created['color'] == '#ff0000'
        assert created['icon'] == 'folder'
        assert created['created_by'] == user['id']

        with app.app_context():
            log = ActivityLog.query.one()
            assert log.activity_type == 'create_category'
            assert log.target_type == 'category'
            assert log.target_id == created['id']

    def test_create_requires_name(self, client, auth_headers):
        """Test a blank name is a 400."""
        response = client.post('/api/categories', headers=auth_headers, json={'name': '   '})

        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_get_unknown_category_is_json_404(self, client, auth_headers):
        """Test a missing category answers with the JSON error shape."""
        response = client.get('/api/categories/999', headers=auth_headers)

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Category not found'}

    def test_update_category(self, client, app, auth_headers, category, user):
        """Test renaming a category keeps old and new names in the log."""
        response = client.put(f'/api/categories/{category}', headers=auth_headers, json={
            'name': 'People', 'icon': 'users',
        })

        assert response.status_code == 200
        body = response.get_json()['category']
        assert body['name'] == 'People'
        assert body['icon'] == 'users'
        assert body['updated_by'] == user['id']

        with app.app_context():
            log = ActivityLog.query.filter_by(activity_type='update_category').one()
            assert (log.old_value, log.new_value) == ('HR', 'People')


class TestCategoryListingAndDelete:
    """Tests for listing filters and logical deletion."""

    def test_list_returns_active_categories(self, client, app, auth_headers, category, user):
        """Test the listing hides inactive categories unless asked for."""
        with app.app_context():
            db.session.add(Category(name='Archive', is_active=False, created_by=user['id']))
            db.session.commit()

        active = client.get('/api/categories', headers=auth_headers).get_json()
        inactive = client.get('/api/categories?is_active=false', headers=auth_headers).get_json()

        assert [c['name'] for c in active['categories']] == ['HR']
        assert [c['name'] for c in inactive['categories']] == ['Archive']

    def test_delete_is_logical(self, client, app, auth_headers, category):
        """Test deleting flips is_active and keeps the row."""
        response = client.delete(f'/api/categories/{category}', headers=auth_headers)

        assert response.status_code == 200
        with app.app_context():
            row = db.session.get(Category, category)
            assert row is not None
            assert row.is_active is False
            assert ActivityLog.query.filter_by(activity_type='delete_category').count() == 1

    def test_delete_refused_with_active_folders(self, client, app, auth_headers, category, folder):
        """Test a category holding an active folder cannot be deleted."""
        response = client.delete(f'/api/categories/{category}', headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()['folders'] == 1
        with app.app_context():
            assert db.session.get(Category, category).is_active is True

    def test_delete_refused_with_active_files(self, client, app, auth_headers, category, user):
        """Test a category holding an active file cannot be deleted."""
        with app.app_context():
            db.session.add(FileItem(name='a.txt', original_name='a.txt', file_path='/nowhere/a.txt',
                                    category_id=category, created_by=user['id']))
            db.session.commit()

        response = client.delete(f'/api/categories/{category}', headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()['files'] == 1
