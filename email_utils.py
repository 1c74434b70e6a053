import logging
from threading import Thread

from flask import render_template, current_app
from flask_mail import Message

from app import mail

logger = logging.getLogger(__name__)


def send_async_email(app, msg):
    with app.app_context():
        try:
            mail.send(msg)
        except Exception:
            logger.exception("Failed to send email to %s", ', '.join(msg.recipients))


def send_email(to, subject, template, **kwargs):
    app = current_app._get_current_object()
    msg = Message(
        subject,
        recipients=[to],
        sender=app.config.get('MAIL_DEFAULT_SENDER') or app.config['MAIL_USERNAME'] or 'noreply@scholarshipportal.com'
    )
    msg.html = render_template(template, **kwargs)

    # Send email in a separate thread
    thr = Thread(target=send_async_email, args=[app, msg])
    thr.start()
    return thr
