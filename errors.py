"""
Error kinds returned by dispatcher actions.

Handlers raise one of these and the dispatcher turns it into a
``{'success': False, 'message': ..., 'error': <kind>}`` envelope with the
matching HTTP status. Raising before any write (or letting the dispatcher
roll the session back) guarantees no partial state is committed.
"""


class ActionError(Exception):
    """Base class for all expected action failures"""
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def kind(self):
        return type(self).__name__

    def to_dict(self):
        return {'success': False, 'message': self.message, 'error': self.kind}


class ValidationError(ActionError):
    status_code = 400
    default_message = 'Invalid or missing fields'


class Unauthorized(ActionError):
    status_code = 401
    default_message = 'Authentication required. Please login.'


class InvalidCredentials(ActionError):
    status_code = 401
    default_message = 'Invalid credentials'


class Forbidden(ActionError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(ActionError):
    status_code = 404
    default_message = 'Not found'


class DuplicateEmail(ActionError):
    status_code = 409
    default_message = 'Email already registered'


class AlreadyApplied(ActionError):
    status_code = 409
    default_message = 'You have already applied to this scholarship'


class InvalidTransition(ActionError):
    status_code = 409
    default_message = 'This application has already been reviewed'


class NotAvailable(ActionError):
    status_code = 422
    default_message = 'This scholarship is no longer accepting applications'
