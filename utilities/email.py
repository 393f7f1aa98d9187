import logging
import requests
from config import BREVO_KEY, MAIL_SENDER
from .constants import BREVO_SEND_URL

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html: str):
    """Send one message through Brevo.

    Returns ``(True, None)`` on a 2xx response, otherwise ``(False, reason)``.
    Never raises for transport errors so callers can decide how to report.
    """
    if not BREVO_KEY:
        return False, 'BREVO_KEY not configured on server'
    payload = {
        'to': [{'email': to_email}],
        'sender': {'name': 'Interview Platform', 'email': MAIL_SENDER},
        'subject': subject,
        'htmlContent': html,
    }
    headers = {
        'accept': 'application/json',
        'content-type': 'application/json',
        'api-key': BREVO_KEY,
    }
    try:
        resp = requests.post(BREVO_SEND_URL, headers=headers, json=payload, timeout=20)
        if 200 <= resp.status_code < 300:
            logger.info("Sent email to %s", to_email)
            return True, None
        return False, f'Brevo error {resp.status_code}: {resp.text[:200]}'
    except requests.RequestException as e:
        return False, str(e)
