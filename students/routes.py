"""
Student actions for the Scholarship Portal
"""

import logging
from datetime import datetime

from flask_login import current_user
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app import db, Application, StudentProfile
from api.routes import action, acting_user_id, envelope
from application_lifecycle import APPLICATION_STATUSES, can_withdraw, ensure_available
from db_utils import application_to_dict, is_foreign_key_violation, is_unique_violation, row_to_dict, rows_to_dicts
from errors import AlreadyApplied, Forbidden, NotFound
from validators import clean_str, parse_choice, parse_id

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('phone', 'address', 'education', 'skills')


def _profile_dict(user_id):
    profile = db.session.execute(
        text("""
            SELECT id, user_id, phone, address, education, skills, created_at
            FROM student_profiles WHERE user_id = :user_id
        """),
        {"user_id": user_id}
    ).fetchone()
    return row_to_dict(profile) or {}


@action('saveProfile', role='student')
def save_profile(payload):
    """Create or update the caller's profile"""
    user_id = acting_user_id(payload, 'user_id')
    values = {field: clean_str(payload, field) for field in PROFILE_FIELDS}

    profile = StudentProfile.query.filter_by(user_id=user_id).first()
    if profile is None:
        profile = StudentProfile(user_id=user_id, **values)
        db.session.add(profile)
    else:
        for field, value in values.items():
            setattr(profile, field, value)
    try:
        db.session.flush()
    except IntegrityError:
        # A concurrent first save created the row, update it instead
        db.session.rollback()
        db.session.execute(
            text("""
                UPDATE student_profiles
                SET phone = :phone, address = :address, education = :education, skills = :skills
                WHERE user_id = :user_id
            """),
            dict(values, user_id=user_id)
        )

    logger.info("Saved profile for user %s", user_id)
    return envelope('Profile saved!', profile=_profile_dict(user_id))


@action('getProfile')
def get_profile(payload):
    """Students read their own profile, admins may read any user's"""
    if current_user.is_admin() and payload.get('user_id') not in (None, ''):
        user_id = parse_id(payload, 'user_id')
    elif current_user.is_student():
        user_id = acting_user_id(payload, 'user_id')
    else:
        raise Forbidden('Admins must name the user_id to read.')

    return envelope(profile=_profile_dict(user_id))


@action('applyScholarship', role='student')
def apply_scholarship(payload):
    """Submit a pending application for an available scholarship"""
    student_id = acting_user_id(payload, 'student_id')
    scholarship_id = parse_id(payload, 'scholarship_id')

    scholarship = db.session.execute(
        text("SELECT id, status, deadline FROM scholarships WHERE id = :id"),
        {"id": scholarship_id}
    ).fetchone()
    if not scholarship:
        raise NotFound('Scholarship not found')

    ensure_available(scholarship.status, scholarship.deadline)

    application = Application(
        scholarship_id=scholarship_id,
        student_id=student_id,
        message=clean_str(payload, 'message'),
        status='pending',
        applied_at=datetime.utcnow()
    )
    # The unique_application constraint decides duplicates, not a prior SELECT
    try:
        db.session.add(application)
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        if is_unique_violation(e, 'unique_application', 'applications', ('scholarship_id', 'student_id')):
            raise AlreadyApplied()
        if is_foreign_key_violation(e):
            # Scholarship deleted since the SELECT above
            raise NotFound('Scholarship not found')
        raise

    logger.info("Student %s applied to scholarship %s", student_id, scholarship_id)
    return envelope('Application submitted!', application=application_to_dict(application))


@action('getMyApplications', role='student')
def get_my_applications(payload):
    """The caller's applications with scholarship details"""
    student_id = acting_user_id(payload, 'student_id')
    conditions = ["a.student_id = :student_id"]
    params = {"student_id": student_id}

    status = clean_str(payload, 'status')
    if status and status.lower() != 'all':
        params['status'] = parse_choice(status, APPLICATION_STATUSES, 'status')
        conditions.append("a.status = :status")

    applications = db.session.execute(
        text(f"""
            SELECT a.id, a.scholarship_id, a.student_id, a.message, a.status,
                   a.applied_at, a.reviewed_at, a.reviewed_by,
                   s.title, s.amount, s.scholarship_type, s.deadline
            FROM applications a
            JOIN scholarships s ON a.scholarship_id = s.id
            WHERE {' AND '.join(conditions)}
            ORDER BY a.applied_at DESC, a.id DESC
        """),
        params
    ).fetchall()

    return envelope(applications=rows_to_dicts(applications))


@action('withdrawApplication', role='student')
def withdraw_application(payload):
    """Delete one of the caller's pending applications"""
    student_id = acting_user_id(payload, 'student_id')
    application_id = parse_id(payload, 'id')

    application = db.session.execute(
        text("SELECT id, student_id, status FROM applications WHERE id = :id"),
        {"id": application_id}
    ).fetchone()
    if not application:
        raise NotFound('Application not found')
    if application.student_id != student_id:
        raise Forbidden('You can only withdraw your own applications.')
    if not can_withdraw(application.status):
        raise Forbidden('Cannot withdraw an application that has been reviewed.')

    # Scoped to the pending row so a concurrent review wins
    result = db.session.execute(
        text("""
            DELETE FROM applications
            WHERE id = :id AND student_id = :student_id AND status = 'pending'
        """),
        {"id": application_id, "student_id": student_id}
    )
    if result.rowcount == 0:
        raise Forbidden('Cannot withdraw an application that has been reviewed.')

    logger.info("Student %s withdrew application %s", student_id, application_id)
    return envelope('Application withdrawn successfully')
