"""
Scholarship availability and application status rules

Expiry is never stored: a scholarship past its deadline is computed as
expired every time it is listed or applied to.
"""
from datetime import date, datetime

from errors import InvalidTransition, NotAvailable

SCHOLARSHIP_TYPES = ('Government', 'Private', 'University', 'International', 'NGO')
SCHOLARSHIP_STATUSES = ('active', 'inactive')

APPLICATION_STATUSES = ('pending', 'accepted', 'rejected')

# accepted and rejected are terminal
APPLICATION_TRANSITIONS = {
    'pending': ('accepted', 'rejected'),
    'accepted': (),
    'rejected': (),
}

# Only these statuses may be withdrawn (deleted) by the owning student
WITHDRAWABLE_STATUSES = ('pending',)


def today():
    """The date listings and applications are checked against"""
    return date.today()


def as_date(value):
    """Coerce a DATE column value (date, datetime or 'YYYY-MM-DD' string)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()


def is_expired(deadline, on=None):
    on = on or today()
    deadline = as_date(deadline)
    return deadline is None or deadline < on


def is_available(status, deadline, on=None):
    """A scholarship accepts applications while active and not past its deadline"""
    return (status or '').lower() == 'active' and not is_expired(deadline, on)


def ensure_available(status, deadline, on=None):
    if (status or '').lower() != 'active':
        raise NotAvailable('This scholarship is inactive and is no longer accepting applications.')
    if is_expired(deadline, on):
        raise NotAvailable('The deadline for this scholarship has passed.')


def can_transition(current, new):
    return new in APPLICATION_TRANSITIONS.get(current, ())


def ensure_transition(current, new):
    if not can_transition(current, new):
        if current == new:
            raise InvalidTransition(f'Application is already {current}.')
        raise InvalidTransition(f'Cannot change an application from {current} to {new}.')


def can_withdraw(status):
    return status in WITHDRAWABLE_STATUSES
