"""
Action dispatcher for the Scholarship Portal API

Every request is ``POST /api?action=<name>`` with a JSON body. Handlers are
registered with the ``action`` decorator, which also declares who may call
them. The acting user always comes from the login session.
"""

from functools import wraps
import logging

from flask import Blueprint, request, jsonify
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from app import db
from errors import ActionError, Unauthorized, Forbidden

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)

# action name -> wrapped handler
ACTIONS = {}


def action(name, role=None, public=False):
    """Register a handler for ``name``.

    ``public`` actions need no session; otherwise the caller must be logged
    in and, when ``role`` is given, hold that role.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(payload):
            if not public:
                if not current_user.is_authenticated:
                    raise Unauthorized()
                if role and current_user.role != role:
                    raise Forbidden(f'Access denied. {role.capitalize()} access required.')
            return func(payload)

        if name in ACTIONS:
            raise ValueError(f"Action '{name}' is already registered")
        ACTIONS[name] = wrapper
        return func
    return decorator


def envelope(message='', **data):
    """Successful response body: success flag, message and payload keys"""
    body = {'success': True, 'message': message}
    body.update(data)
    return body


def acting_user_id(payload, field):
    """Return the session user's id, rejecting a client-supplied id that disagrees"""
    claimed = payload.get(field)
    if claimed not in (None, '') and str(claimed) != str(current_user.id):
        logger.warning("User %s sent %s=%r, rejecting", current_user.id, field, claimed)
        raise Forbidden(f'{field} does not match the logged in user.')
    return current_user.id


@api_bp.route('', methods=['POST'])
def dispatch():
    """Run the handler named by the ``action`` query parameter"""
    name = request.args.get('action', '')
    handler = ACTIONS.get(name)
    if handler is None:
        return jsonify({'success': False, 'message': 'Invalid action', 'error': 'InvalidAction'}), 400

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}

    try:
        body = handler(payload)
        db.session.commit()
        return jsonify(body)
    except ActionError as e:
        db.session.rollback()
        logger.warning("Action %s rejected: %s (%s)", name, e.kind, e.message)
        return jsonify(e.to_dict()), e.status_code
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Action %s failed", name)
        return jsonify({'success': False, 'message': 'A database error occurred. Please try again.', 'error': 'ServerError'}), 500
