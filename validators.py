"""
Payload validation helpers shared by the action handlers
"""
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
MIN_PASSWORD_LENGTH = 8


def clean_str(payload, field, default=''):
    value = payload.get(field)
    if value is None:
        return default
    return str(value).strip()


def require_fields(payload, *fields):
    """Raise ValidationError naming every blank required field"""
    missing = [f for f in fields if not clean_str(payload, f)]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def validate_email(email):
    if not EMAIL_PATTERN.match(email or ''):
        raise ValidationError('Invalid email address.')
    return email.lower()


def require_password(payload, field='password'):
    """The raw password string, ValidationError for any other JSON type"""
    password = payload.get(field)
    if not isinstance(password, str):
        raise ValidationError(f'{field} must be a string.')
    return password


def validate_password(password):
    if not isinstance(password, str):
        raise ValidationError('Password must be a string.')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
    return password


def parse_date(value, field='deadline'):
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a date in YYYY-MM-DD format.')


def parse_amount(value, field='amount'):
    """Positive decimal with at most two fractional digits"""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'{field} must be a number.')
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f'{field} must be greater than 0.')
    return amount.quantize(Decimal('0.01'))


def parse_choice(value, choices, field):
    """Match ``value`` against ``choices`` case-insensitively, returning the canonical spelling"""
    for choice in choices:
        if str(value).strip().lower() == choice.lower():
            return choice
    raise ValidationError(f"{field} must be one of: {', '.join(choices)}")


def parse_id(payload, field='id'):
    value = payload.get(field)
    # bools and fractional floats are not ids
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f'{field} must be an integer.')
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer.')
    if parsed <= 0:
        raise ValidationError(f'{field} must be an integer.')
    return parsed
