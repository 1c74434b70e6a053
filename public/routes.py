"""
Public actions: scholarship listing and the contact form
"""

import logging

from sqlalchemy import text

from app import db, Contact
from api.routes import action, envelope
from application_lifecycle import SCHOLARSHIP_TYPES, today
from db_utils import escape_like, rows_to_dicts
from validators import clean_str, parse_choice, require_fields, validate_email

logger = logging.getLogger(__name__)

# sort key -> ORDER BY clause
LISTING_SORTS = {
    'newest': 's.created_at DESC, s.id DESC',
    'deadline': 's.deadline ASC, s.id ASC',
    'amount': 's.amount DESC, s.id ASC',
}


@action('getAllScholarships', public=True)
def get_all_scholarships(payload):
    """Active scholarships whose deadline has not passed"""
    conditions = ["s.status = 'active'", "s.deadline >= :today"]
    params = {"today": today().isoformat()}

    scholarship_type = clean_str(payload, 'scholarship_type')
    if scholarship_type and scholarship_type.lower() != 'all':
        params['scholarship_type'] = parse_choice(scholarship_type, SCHOLARSHIP_TYPES, 'scholarship_type')
        conditions.append("s.scholarship_type = :scholarship_type")

    search = clean_str(payload, 'search')
    if search:
        params['search'] = f"%{escape_like(search.lower())}%"
        conditions.append(
            "(LOWER(s.title) LIKE :search ESCAPE '!' OR LOWER(COALESCE(s.description, '')) LIKE :search ESCAPE '!')"
        )

    order_by = LISTING_SORTS.get(clean_str(payload, 'sort', 'newest'), LISTING_SORTS['newest'])

    scholarships = db.session.execute(
        text(f"""
            SELECT s.id, s.admin_id, s.title, s.description, s.scholarship_type, s.eligibility,
                   s.deadline, s.amount, s.status, s.created_at,
                   u.name AS admin_name,
                   (SELECT COUNT(*) FROM applications a WHERE a.scholarship_id = s.id) AS application_count
            FROM scholarships s
            JOIN users u ON s.admin_id = u.id
            WHERE {' AND '.join(conditions)}
            ORDER BY {order_by}
        """),
        params
    ).fetchall()

    return envelope(scholarships=rows_to_dicts(scholarships))


@action('addContact', public=True)
def add_contact(payload):
    """Store an inquiry from the contact form"""
    require_fields(payload, 'name', 'email', 'message')
    contact = Contact(
        name=clean_str(payload, 'name'),
        email=validate_email(clean_str(payload, 'email')),
        phone=clean_str(payload, 'phone') or None,
        message=clean_str(payload, 'message')
    )
    db.session.add(contact)
    db.session.flush()

    logger.info("Contact inquiry %s received from %s", contact.id, contact.email)
    return envelope('Thank you! We will get back to you soon.', contact={
        'id': contact.id,
        'name': contact.name,
        'email': contact.email,
        'phone': contact.phone,
        'message': contact.message
    })
