#!/usr/bin/env python3
"""
Scholarship Portal - public listing, student portal and admin console
Main Flask Application
"""

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager, UserMixin
from flask_mail import Mail
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime
import logging
import os
import secrets
from dotenv import load_dotenv

# Load environment variables
load_dotenv('config.env')

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


def load_secret_key():
    """SECRET_KEY from the environment, or a random per-process key when unset"""
    secret_key = os.environ.get('SECRET_KEY')
    if not secret_key:
        secret_key = secrets.token_hex(32)
        logger.warning("SECRET_KEY not set, using a random key; sessions will not survive a restart")
    return secret_key


# Initialize Flask app
app = Flask(__name__)
app.config['SECRET_KEY'] = load_secret_key()

database_url = os.environ.get('DATABASE_URL')

# SQLAlchemy requires 'postgresql://', some hosts hand out 'postgres://'
if database_url and database_url.startswith('postgres://'):
    database_url = database_url.replace('postgres://', 'postgresql://', 1)

if not database_url:
    # Build MySQL connection string from individual environment variables
    db_host = os.environ.get('DB_HOST', '127.0.0.1')
    db_user = os.environ.get('DB_USER', 'root')
    db_pass = os.environ.get('DB_PASS', '')
    db_name = os.environ.get('DB_NAME', 'scholarship_portal')
    db_port = int(os.environ.get('DB_PORT', 3306))
    database_url = f"mysql+pymysql://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"
    logger.warning("DATABASE_URL not set, using MySQL connection to %s", db_host)

app.config['SQLALCHEMY_DATABASE_URI'] = database_url
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
if database_url.startswith('mysql'):
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'connect_args': {'charset': 'utf8mb4'}
    }

# Initialize extensions
db = SQLAlchemy(app)
login_manager = LoginManager()
login_manager.init_app(app)

app.config['MAIL_SERVER'] = os.environ.get('MAIL_SERVER', 'localhost')
app.config['MAIL_PORT'] = int(os.environ.get('MAIL_PORT', 8025))
app.config['MAIL_USE_TLS'] = os.environ.get('MAIL_USE_TLS', 'false').lower() in ['true', '1', 't']
app.config['MAIL_USE_SSL'] = os.environ.get('MAIL_USE_SSL', 'false').lower() in ['true', '1', 't']
app.config['MAIL_USERNAME'] = os.environ.get('MAIL_USERNAME')
app.config['MAIL_PASSWORD'] = os.environ.get('MAIL_PASSWORD')
app.config['MAIL_SUPPRESS_SEND'] = os.environ.get('MAIL_SUPPRESS_SEND', 'true').lower() in ['true', '1', 't']
mail = Mail(app)

REQUIRED_TABLES = ['users', 'scholarships', 'applications', 'contacts', 'student_profiles']


# User model
class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum('admin', 'student', name='user_role'), nullable=False, default='student')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    scholarships = db.relationship('Scholarship', backref='admin', lazy='dynamic')
    profile = db.relationship('StudentProfile', backref='user', uselist=False)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == 'admin'

    def is_student(self):
        return self.role == 'student'

    def to_dict(self):
        """Public fields only, the password hash never leaves the server"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


# Scholarship model
class Scholarship(db.Model):
    __tablename__ = 'scholarships'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    scholarship_type = db.Column(
        db.Enum('Government', 'Private', 'University', 'International', 'NGO', name='scholarship_type'),
        nullable=False,
        default='Government'
    )
    eligibility = db.Column(db.Text, nullable=False)
    deadline = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.Enum('active', 'inactive', name='scholarship_status'), nullable=False, default='active', index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    applications = db.relationship('Application', backref='scholarship', lazy='dynamic')


# Application model
class Application(db.Model):
    __tablename__ = 'applications'
    __table_args__ = (
        db.UniqueConstraint('scholarship_id', 'student_id', name='unique_application'),
    )

    id = db.Column(db.Integer, primary_key=True)
    scholarship_id = db.Column(db.Integer, db.ForeignKey('scholarships.id', ondelete='CASCADE'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    message = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.Enum('pending', 'accepted', 'rejected', name='application_status'),
        nullable=False,
        default='pending',
        index=True
    )
    applied_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    # Relationships
    student = db.relationship('User', foreign_keys=[student_id], backref='applications')
    reviewer = db.relationship('User', foreign_keys=[reviewed_by])


# Contact inquiries from the public site
class Contact(db.Model):
    __tablename__ = 'contacts'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=True)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


# One-to-one extension of a student user
class StudentProfile(db.Model):
    __tablename__ = 'student_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.Text, nullable=True)
    education = db.Column(db.Text, nullable=True)
    skills = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@app.route('/health')
def health():
    """Database connectivity and required tables"""
    from verify_database_structure import table_status

    try:
        tables = table_status()
    except Exception:
        logger.exception("Health check could not reach the database")
        return jsonify({'status': 'unavailable', 'tables': {}}), 503

    status = 'ok' if all(tables.values()) else 'degraded'
    return jsonify({'status': status, 'tables': tables}), 200 if status == 'ok' else 503


# Action handlers register themselves with the dispatcher on import
from api.routes import api_bp
import auth.routes  # noqa: E402,F401
import public.routes  # noqa: E402,F401
import students.routes  # noqa: E402,F401
import admin.routes  # noqa: E402,F401

# Initialize database
with app.app_context():
    try:
        db.create_all()
        logger.info("Database tables ready")
    except Exception as e:
        logger.error("Could not create database tables: %s", e)

# Register blueprints
app.register_blueprint(api_bp, url_prefix='/api')


# Error handlers
@app.errorhandler(404)
def not_found(error):
    return jsonify({'success': False, 'message': 'Not found', 'error': 'NotFound'}), 404


@app.errorhandler(405)
def method_not_allowed(error):
    return jsonify({'success': False, 'message': 'Method not allowed', 'error': 'MethodNotAllowed'}), 405


@app.errorhandler(500)
def internal_error(error):
    db.session.rollback()
    return jsonify({'success': False, 'message': 'Internal server error', 'error': 'ServerError'}), 500
