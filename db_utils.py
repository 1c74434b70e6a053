"""
Row conversion helpers for raw SQL results
"""
from datetime import date, datetime
from decimal import Decimal


def serialize_value(value):
    """Make DATE/DATETIME/DECIMAL column values JSON friendly"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(row):
    if row is None:
        return None
    return {key: serialize_value(value) for key, value in row._mapping.items()}


def rows_to_dicts(rows):
    return [row_to_dict(row) for row in rows]


def model_to_dict(obj, fields):
    return {field: serialize_value(getattr(obj, field)) for field in fields}


APPLICATION_FIELDS = ('id', 'scholarship_id', 'student_id', 'message', 'status',
                      'applied_at', 'reviewed_at', 'reviewed_by')

SCHOLARSHIP_FIELDS = ('id', 'admin_id', 'title', 'description', 'scholarship_type', 'eligibility',
                      'deadline', 'amount', 'status', 'created_at')


def application_to_dict(application):
    return model_to_dict(application, APPLICATION_FIELDS)


def scholarship_to_dict(scholarship):
    return model_to_dict(scholarship, SCHOLARSHIP_FIELDS)


def escape_like(value):
    """Escape LIKE wildcards so ``value`` matches literally (use with ESCAPE '!')"""
    return value.replace('!', '!!').replace('%', '!%').replace('_', '!_')


def is_unique_violation(error, constraint, table, columns):
    """True when an IntegrityError came from ``constraint``.

    MySQL and PostgreSQL name the constraint in the message, SQLite lists the
    columns instead.
    """
    message = str(getattr(error, 'orig', error))
    if constraint in message:
        return True
    return 'UNIQUE constraint failed' in message and all(f'{table}.{c}' in message for c in columns)


def is_foreign_key_violation(error):
    return 'foreign key' in str(getattr(error, 'orig', error)).lower()
