"""Share links and email invites.

Every link or invite is backed by its own pending InterviewSession whose
access_token is the credential the candidate presents.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional
import config
from extensions import db
from interview_logic import commit_or_rollback, create_session, get_session
from models import Interview, InterviewSession, utcnow
from utilities import email as mailer
from utilities.constants import INTERVIEW_LINK_PLACEHOLDER
from utilities.errors import NotFound, ValidationError
from utilities.tokens import generate_access_token
from utilities.validators import looks_like_email

logger = logging.getLogger(__name__)


def _get_interview(interview_id):
    interview = db.session.get(Interview, interview_id) if interview_id else None
    if interview is None:
        raise NotFound('Interview not found')
    return interview


def build_share_url(token):
    return f"{config.APP_URL.rstrip('/')}/interview/access?token={token}"


def issue_share_token(interview_id, max_uses=1, expires_in_days=7):
    """Create a pending session bound to a fresh token.

    max_uses and expires_at are echoed back to the caller but are not stored
    and nothing checks them when the token is later resolved.
    """
    _get_interview(interview_id)
    token = generate_access_token().upper()
    try:
        expires_at = utcnow() + timedelta(days=int(expires_in_days or 0))
    except (TypeError, ValueError, OverflowError):
        raise ValidationError('expires_in_days must be a number of days')
    session = create_session(interview_id, token)
    logger.info("Issued share token for interview %s (session %s)", interview_id, session.id)
    return {
        'id': session.id,
        'token': token,
        'url': build_share_url(token),
        'expires_at': expires_at.isoformat(),
        'max_uses': max_uses,
        'current_uses': 0,
    }


def list_share_links(interview_id):
    interview = _get_interview(interview_id)
    sessions = (
        InterviewSession.query
        .filter(InterviewSession.interview_id == interview_id,
                InterviewSession.access_token.isnot(None))
        .order_by(InterviewSession.created_at.desc())
        .all()
    )
    links = [
        {
            'id': s.id,
            'token': s.access_token,
            'url': build_share_url(s.access_token),
            'candidate_email': s.candidate_email,
            'status': s.status,
            'created_at': s.created_at.isoformat() if s.created_at else None,
            'current_uses': 1 if s.status == 'completed' else 0,
        }
        for s in sessions
    ]
    return {'interview': interview.to_dict(), 'share_links': links}


def delete_share_link(session_id):
    session = get_session(session_id)
    db.session.delete(session)
    commit_or_rollback('delete share link')
    logger.info("Deleted share link session %s", session_id)


@dataclass
class InviteResult:
    sent: List[dict] = field(default_factory=list)
    failed_email: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self):
        return self.error is None

    def to_dict(self):
        data = {'invites_sent': len(self.sent), 'invite_details': self.sent}
        if self.failed_email:
            data['failed_email'] = self.failed_email
        return data


def issue_email_invites(interview_id, emails, subject, message_template):
    """Send one invite per address, each with its own token and session.

    Stops at the first address the mail service rejects. Sessions created for
    addresses before it are kept, and the result reports how many went out.
    """
    _get_interview(interview_id)
    emails = [e.strip() for e in (emails or []) if e and e.strip()]
    if not emails:
        raise ValidationError('At least one email address is required.')
    invalid = [e for e in emails if not looks_like_email(e)]
    if invalid:
        raise ValidationError(f"Invalid email address: {', '.join(invalid)}")
    if not subject or not message_template:
        raise ValidationError('Subject and message are required.')

    result = InviteResult()
    for address in emails:
        token = generate_access_token().upper()
        session = create_session(interview_id, token, candidate_email=address)
        share_url = build_share_url(token)
        body = message_template.replace(INTERVIEW_LINK_PLACEHOLDER, share_url)

        ok, err = mailer.send_email(address, subject, body)
        if not ok:
            logger.error("Failed to send invite to %s: %s", address, err)
            result.failed_email = address
            result.error = f'Failed to send email to {address}'
            break

        result.sent.append({
            'email': address,
            'token': token,
            'session_id': session.id,
            'share_url': share_url,
        })

    logger.info("Sent %d of %d invites for interview %s", len(result.sent), len(emails), interview_id)
    return result
