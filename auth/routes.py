"""
Authentication actions for the Scholarship Portal
"""

import logging

from flask_login import login_user, logout_user, current_user
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app import db, User
from api.routes import action, envelope
from errors import DuplicateEmail, Forbidden, InvalidCredentials
from validators import clean_str, require_fields, require_password, validate_email, validate_password

logger = logging.getLogger(__name__)


@action('register', public=True)
def register(payload):
    """Create a student account"""
    require_fields(payload, 'name', 'email', 'password')
    name = clean_str(payload, 'name')
    email = validate_email(clean_str(payload, 'email'))
    password = validate_password(payload.get('password'))

    # Admins are provisioned out of band with create_admin.py
    role = clean_str(payload, 'role', 'student').lower() or 'student'
    if role != 'student':
        raise Forbidden('Admin accounts cannot be self-registered. Contact an administrator.')

    existing_user = db.session.execute(
        text("SELECT id FROM users WHERE LOWER(email) = :email"),
        {"email": email}
    ).fetchone()
    if existing_user:
        raise DuplicateEmail()

    new_user = User(name=name, email=email, role='student')
    new_user.set_password(password)
    try:
        db.session.add(new_user)
        db.session.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.session.rollback()
        raise DuplicateEmail()

    logger.info("Registered student %s (id=%s)", email, new_user.id)
    return envelope('Registration successful!', user=new_user.to_dict())


@action('login', public=True)
def login(payload):
    """Start a session"""
    require_fields(payload, 'email', 'password')
    email = clean_str(payload, 'email').lower()
    password = require_password(payload)

    user = User.query.filter(db.func.lower(User.email) == email).first()
    if not user or not user.check_password(password):
        raise InvalidCredentials()

    login_user(user)
    logger.info("User %s logged in", user.id)
    return envelope(f'Welcome back, {user.name}!', user=user.to_dict())


@action('logout')
def logout(payload):
    """End the session"""
    logger.info("User %s logged out", current_user.id)
    logout_user()
    return envelope('You have been logged out successfully.')


@action('currentUser')
def current_user_info(payload):
    return envelope(user=current_user.to_dict())
