from portal.services.repository import get_repository

from conftest import OWNER_EMAIL, STAFF_EMAIL


def _user_id(app, email):
    with app.app_context():
        return get_repository().find_user_by_email(email)['id']


def _new_user(**overrides):
    data = {
        'name': 'Karthik R',
        'email': 'karthik@example.com',
        'vehicle_number': 'tn-38-gh-1111',
        'mobile_number': '9000000002',
        'password': 'secret1',
    }
    data.update(overrides)
    return data


def test_user_management_is_admin_only(staff_client, user_client):
    assert staff_client.get('/users/').status_code == 403
    assert user_client.get('/users/').status_code == 403
    assert staff_client.post('/users/create', data=_new_user()).status_code == 403


def test_user_list(logged_in_client):
    rv = logged_in_client.get('/users/')
    assert rv.status_code == 200
    assert b'User Management' in rv.data
    assert STAFF_EMAIL.encode() in rv.data
    assert OWNER_EMAIL.encode() in rv.data


def test_create_user(app, logged_in_client):
    rv = logged_in_client.post('/users/create', data=_new_user(), follow_redirects=True)
    assert b'User account created successfully!' in rv.data
    assert b'karthik@example.com' in rv.data

    with app.app_context():
        doc = get_repository().find_user_by_email('karthik@example.com')
    assert doc['role'] == 'user'
    assert doc['vehicleNumber'] == 'TN-38-GH-1111'


def test_create_user_validation(logged_in_client):
    rv = logged_in_client.post('/users/create', data=_new_user(mobile_number=''))
    assert b'All fields are required.' in rv.data

    rv = logged_in_client.post('/users/create', data=_new_user(email='not-an-email'))
    assert b'Please enter a valid email address.' in rv.data

    rv = logged_in_client.post('/users/create', data=_new_user(mobile_number='98765'))
    assert b'Please enter a valid mobile number.' in rv.data

    rv = logged_in_client.post('/users/create', data=_new_user(password='123'))
    assert b'Password should be at least 6 characters.' in rv.data

    rv = logged_in_client.post('/users/create', data=_new_user(email=OWNER_EMAIL))
    assert b'An account with this email already exists.' in rv.data


def test_delete_user(app, logged_in_client):
    owner_id = _user_id(app, OWNER_EMAIL)
    rv = logged_in_client.post(f'/users/{owner_id}/delete', follow_redirects=True)
    assert b'has been deleted.' in rv.data

    with app.app_context():
        assert get_repository().get_user(owner_id) is None


def test_cannot_delete_own_account(app, logged_in_client):
    admin_id = _user_id(app, 'admin@example.com')
    rv = logged_in_client.post(f'/users/{admin_id}/delete', follow_redirects=True)
    assert b'You cannot delete your own account.' in rv.data


def test_delete_unknown_user(logged_in_client):
    rv = logged_in_client.post('/users/does-not-exist/delete', follow_redirects=True)
    assert b'User not found.' in rv.data


def test_create_user_store_failure_hides_details(app, logged_in_client, monkeypatch):
    repository = app.extensions['portal_repository']

    def broken(data):
        raise RuntimeError('disk quota exceeded on node-7')

    monkeypatch.setattr(repository, 'create_user', broken)
    rv = logged_in_client.post('/users/create', data=_new_user())
    assert b'Failed to create the account. Please try again.' in rv.data
    assert b'node-7' not in rv.data
