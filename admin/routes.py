"""
Admin actions: scholarship management, application review, contacts and users
"""

import logging
from datetime import datetime

from flask_login import current_user
from sqlalchemy import select, text, update

from app import db, Application, Scholarship
from api.routes import action, acting_user_id, envelope
from application_lifecycle import (
    APPLICATION_STATUSES, SCHOLARSHIP_STATUSES, SCHOLARSHIP_TYPES,
    ensure_transition, is_expired, today
)
from db_utils import application_to_dict, row_to_dict, rows_to_dicts, scholarship_to_dict
from errors import Forbidden, InvalidTransition, NotFound, ValidationError
from validators import clean_str, parse_amount, parse_choice, parse_date, parse_id, require_fields

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'description', 'scholarship_type', 'eligibility', 'deadline', 'amount', 'status')

# field -> (choices, value used when creating without one)
ENUM_DEFAULTS = {
    'scholarship_type': (SCHOLARSHIP_TYPES, 'Government'),
    'status': (SCHOLARSHIP_STATUSES, 'active'),
}


def _scholarship_values(payload, partial=False):
    """Validate scholarship fields; with ``partial`` only the fields present are checked"""
    if not partial:
        require_fields(payload, 'title', 'eligibility', 'deadline', 'amount')

    values = {}
    for field in EDITABLE_FIELDS:
        if partial and field not in payload:
            continue
        if field in ('title', 'eligibility'):
            value = clean_str(payload, field)
            if not value:
                raise ValidationError(f'{field} cannot be empty.')
            values[field] = value
        elif field == 'description':
            values[field] = clean_str(payload, field)
        elif field == 'deadline':
            values[field] = parse_date(payload.get(field))
        elif field == 'amount':
            values[field] = parse_amount(payload.get(field))
        elif field in ENUM_DEFAULTS:
            choices, default = ENUM_DEFAULTS[field]
            value = payload.get(field)
            # Defaults only fill a new scholarship, a blank value on update is an error
            if not partial and value in (None, ''):
                value = default
            values[field] = parse_choice(value, choices, field)
    return values


def _owned_scholarship(scholarship_id, admin_id):
    """Load a scholarship, raising NotFound/Forbidden unless ``admin_id`` owns it"""
    scholarship = db.session.get(Scholarship, scholarship_id)
    if scholarship is None:
        raise NotFound('Scholarship not found')
    if scholarship.admin_id != admin_id:
        raise Forbidden('You can only manage your own scholarships.')
    return scholarship


@action('createScholarship', role='admin')
def create_scholarship(payload):
    """Post a new scholarship owned by the caller"""
    admin_id = acting_user_id(payload, 'admin_id')
    values = _scholarship_values(payload)

    scholarship = Scholarship(admin_id=admin_id, **values)
    db.session.add(scholarship)
    db.session.flush()

    logger.info("Admin %s created scholarship %s", admin_id, scholarship.id)
    return envelope('Scholarship posted!', scholarship=scholarship_to_dict(scholarship))


@action('getMyScholarships', role='admin')
def get_my_scholarships(payload):
    """Every scholarship the caller owns, including inactive and expired ones"""
    admin_id = acting_user_id(payload, 'admin_id')
    conditions = ["s.admin_id = :admin_id"]
    params = {"admin_id": admin_id}

    scholarship_type = clean_str(payload, 'scholarship_type')
    if scholarship_type and scholarship_type.lower() != 'all':
        params['scholarship_type'] = parse_choice(scholarship_type, SCHOLARSHIP_TYPES, 'scholarship_type')
        conditions.append("s.scholarship_type = :scholarship_type")

    status = clean_str(payload, 'status')
    if status and status.lower() != 'all':
        params['status'] = parse_choice(status, SCHOLARSHIP_STATUSES, 'status')
        conditions.append("s.status = :status")

    rows = db.session.execute(
        text(f"""
            SELECT s.id, s.admin_id, s.title, s.description, s.scholarship_type, s.eligibility,
                   s.deadline, s.amount, s.status, s.created_at,
                   (SELECT COUNT(*) FROM applications a WHERE a.scholarship_id = s.id) AS application_count
            FROM scholarships s
            WHERE {' AND '.join(conditions)}
            ORDER BY s.created_at DESC, s.id DESC
        """),
        params
    ).fetchall()

    on = today()
    scholarships = []
    for row in rows:
        item = row_to_dict(row)
        item['is_expired'] = is_expired(row.deadline, on)
        scholarships.append(item)

    return envelope(scholarships=scholarships)


@action('updateScholarship', role='admin')
def update_scholarship(payload):
    """Edit or activate/deactivate one of the caller's scholarships"""
    admin_id = acting_user_id(payload, 'admin_id')
    scholarship_id = parse_id(payload, 'id')
    _owned_scholarship(scholarship_id, admin_id)

    values = _scholarship_values(payload, partial=True)
    if not values:
        raise ValidationError('Nothing to update.')

    db.session.execute(
        update(Scholarship)
        .where(Scholarship.id == scholarship_id, Scholarship.admin_id == admin_id)
        .values(**values),
        execution_options={"synchronize_session": False}
    )
    db.session.expire_all()

    logger.info("Admin %s updated scholarship %s (%s)", admin_id, scholarship_id, ', '.join(sorted(values)))
    scholarship = db.session.get(Scholarship, scholarship_id)
    return envelope('Scholarship updated!', scholarship=scholarship_to_dict(scholarship))


@action('deleteScholarship', role='admin')
def delete_scholarship(payload):
    """Delete one of the caller's scholarships together with its applications"""
    admin_id = acting_user_id(payload, 'admin_id')
    scholarship_id = parse_id(payload, 'id')
    _owned_scholarship(scholarship_id, admin_id)

    removed = db.session.execute(
        text("DELETE FROM applications WHERE scholarship_id = :id"),
        {"id": scholarship_id}
    ).rowcount
    db.session.execute(
        text("DELETE FROM scholarships WHERE id = :id AND admin_id = :admin_id"),
        {"id": scholarship_id, "admin_id": admin_id}
    )
    db.session.expire_all()

    logger.info("Admin %s deleted scholarship %s and %s application(s)", admin_id, scholarship_id, removed)
    return envelope('Scholarship deleted!')


@action('getScholarshipApplications', role='admin')
def get_scholarship_applications(payload):
    """Applications to the caller's scholarships with student details"""
    admin_id = acting_user_id(payload, 'admin_id')
    conditions = ["s.admin_id = :admin_id"]
    params = {"admin_id": admin_id}

    status = clean_str(payload, 'status')
    if status and status.lower() != 'all':
        params['status'] = parse_choice(status, APPLICATION_STATUSES, 'status')
        conditions.append("a.status = :status")

    if payload.get('scholarship_id') not in (None, ''):
        params['scholarship_id'] = parse_id(payload, 'scholarship_id')
        conditions.append("a.scholarship_id = :scholarship_id")

    applications = db.session.execute(
        text(f"""
            SELECT a.id, a.scholarship_id, a.student_id, a.message, a.status,
                   a.applied_at, a.reviewed_at, a.reviewed_by,
                   s.title AS scholarship_title,
                   u.name AS student_name, u.email AS student_email,
                   sp.phone, sp.education, sp.skills
            FROM applications a
            JOIN scholarships s ON a.scholarship_id = s.id
            JOIN users u ON a.student_id = u.id
            LEFT JOIN student_profiles sp ON u.id = sp.user_id
            WHERE {' AND '.join(conditions)}
            ORDER BY a.applied_at DESC, a.id DESC
        """),
        params
    ).fetchall()

    return envelope(applications=rows_to_dicts(applications))


@action('updateApplicationStatus', role='admin')
def update_application_status(payload):
    """Accept or reject a pending application to one of the caller's scholarships"""
    admin_id = acting_user_id(payload, 'admin_id')
    application_id = parse_id(payload, 'id')
    require_fields(payload, 'status')
    new_status = parse_choice(payload.get('status'), APPLICATION_STATUSES, 'status')

    application = db.session.execute(
        text("""
            SELECT a.id, a.status, a.student_id, s.admin_id, s.title,
                   u.name AS student_name, u.email AS student_email
            FROM applications a
            JOIN scholarships s ON a.scholarship_id = s.id
            JOIN users u ON a.student_id = u.id
            WHERE a.id = :id
        """),
        {"id": application_id}
    ).fetchone()
    if not application:
        raise NotFound('Application not found')
    if application.admin_id != admin_id:
        raise Forbidden('You can only review applications to your own scholarships.')
    ensure_transition(application.status, new_status)

    owned_scholarships = select(Scholarship.id).where(Scholarship.admin_id == admin_id)
    result = db.session.execute(
        update(Application)
        .where(
            Application.id == application_id,
            Application.status == 'pending',
            Application.scholarship_id.in_(owned_scholarships)
        )
        .values(status=new_status, reviewed_at=datetime.utcnow(), reviewed_by=admin_id),
        execution_options={"synchronize_session": False}
    )
    if result.rowcount == 0:
        # Reviewed or withdrawn by a concurrent request since the check above
        raise InvalidTransition()
    db.session.expire_all()

    logger.info("Admin %s set application %s to %s", admin_id, application_id, new_status)

    try:
        from email_utils import send_email
        send_email(
            application.student_email,
            f'Your application for {application.title} was {new_status}',
            'email/application_status.html',
            student_name=application.student_name,
            scholarship_name=application.title,
            new_status=new_status
        )
    except Exception:
        logger.exception("Failed to send status email for application %s", application_id)

    reviewed = db.session.get(Application, application_id)
    return envelope(f'Application {new_status}!', application=application_to_dict(reviewed))


@action('getContacts', role='admin')
def get_contacts(payload):
    contacts = db.session.execute(
        text("SELECT id, name, email, phone, message, created_at FROM contacts ORDER BY created_at DESC, id DESC")
    ).fetchall()
    return envelope(contacts=rows_to_dicts(contacts))


@action('deleteContact', role='admin')
def delete_contact(payload):
    contact_id = parse_id(payload, 'id')
    result = db.session.execute(
        text("DELETE FROM contacts WHERE id = :id"),
        {"id": contact_id}
    )
    if result.rowcount == 0:
        raise NotFound('Contact not found')

    logger.info("Admin %s deleted contact %s", current_user.id, contact_id)
    return envelope('Contact deleted!')


@action('getUsers', role='admin')
def get_users(payload):
    """All accounts without password hashes"""
    params = {}
    where = ''
    role = clean_str(payload, 'role')
    if role and role.lower() != 'all':
        params['role'] = parse_choice(role, ('admin', 'student'), 'role')
        where = 'WHERE role = :role'

    users = db.session.execute(
        text(f"SELECT id, name, email, role, created_at FROM users {where} ORDER BY created_at DESC, id DESC"),
        params
    ).fetchall()
    return envelope(users=rows_to_dicts(users))
