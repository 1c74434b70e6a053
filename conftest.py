"""
Shared pytest fixtures: in-memory SQLite database and logged-in clients
"""
import os

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ['MAIL_SUPPRESS_SEND'] = 'true'

from datetime import timedelta

import pytest

from app import app as flask_app, db
from application_lifecycle import today
from create_admin import provision_admin

ADMIN_PASSWORD = 'admin-pass-123'
STUDENT_PASSWORD = 'student-pass-123'


def call(client, action, **payload):
    """POST an action and return (status code, JSON body)"""
    response = client.post(f'/api?action={action}', json=payload)
    return response.status_code, response.get_json()


def days_from_today(days):
    return (today() + timedelta(days=days)).isoformat()


@pytest.fixture
def app():
    flask_app.config['TESTING'] = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def anon(app):
    return app.test_client()


@pytest.fixture
def make_admin(app):
    """Provision an admin out of band and return a client logged in as them"""
    def _make(email='admin@example.com', name='Admin One'):
        with app.app_context():
            provision_admin(name, email, ADMIN_PASSWORD)
        client = app.test_client()
        status, body = call(client, 'login', email=email, password=ADMIN_PASSWORD)
        assert status == 200, body
        client.user = body['user']
        return client
    return _make


@pytest.fixture
def make_student(app):
    """Register a student through the API and return a logged-in client"""
    def _make(email='student@example.com', name='Student One'):
        client = app.test_client()
        status, body = call(client, 'register', name=name, email=email, password=STUDENT_PASSWORD)
        assert status == 200, body
        status, body = call(client, 'login', email=email, password=STUDENT_PASSWORD)
        assert status == 200, body
        client.user = body['user']
        return client
    return _make


@pytest.fixture
def admin(make_admin):
    return make_admin()


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def create_scholarship():
    """Create a scholarship as ``client`` and return its JSON"""
    def _create(client, **overrides):
        payload = {
            'title': 'National Merit Scholarship',
            'description': 'Government scholarship for meritorious students',
            'scholarship_type': 'Government',
            'eligibility': 'Minimum GPA 3.5',
            'deadline': days_from_today(30),
            'amount': 50000,
            'status': 'active',
        }
        payload.update(overrides)
        status, body = call(client, 'createScholarship', **payload)
        assert status == 200, body
        return body['scholarship']
    return _create
