"""Candidate session lifecycle: token resolution, start and completion.

Status moves pending -> in_progress -> completed. "abandoned" is never
written; analytics treats any session that is not completed as abandoned.
"""
import logging
import time
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import Interview, InterviewSession, Question, utcnow
from utilities.errors import AlreadyCompleted, NotFound, StorageError
from utilities.tokens import generate_access_token

logger = logging.getLogger(__name__)


def _seed():
    return current_app.config['SEED']


def commit_or_rollback(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Database error while trying to %s: %s", action, e)
        raise StorageError(f"Failed to {action}") from e


def create_session(interview_id, access_token, candidate_email=None, candidate_name=None, status='pending'):
    session = InterviewSession(
        interview_id=interview_id,
        access_token=access_token,
        candidate_email=candidate_email,
        candidate_name=candidate_name,
        status=status,
    )
    db.session.add(session)
    commit_or_rollback('create session')
    return session


def get_session(session_id):
    session = db.session.get(InterviewSession, session_id) if session_id else None
    if session is None:
        raise NotFound('Session not found')
    return session


def resolve_token(token):
    """Return the session bound to ``token``.

    Reserved demo tokens get a session against the demo interview on first
    use. Raises NotFound for unknown tokens and AlreadyCompleted when the
    session is finished.
    """
    token = (token or '').strip()
    session = InterviewSession.query.filter_by(access_token=token).first() if token else None

    seed = _seed()
    if session is None and token in seed.demo_tokens:
        if db.session.get(Interview, seed.demo_interview_id) is None:
            logger.warning("Demo token %s used but demo interview is not seeded", token)
        else:
            logger.info("Creating demo session for token %s", token)
            session = create_session(
                seed.demo_interview_id,
                token,
                candidate_email=seed.demo_candidate_email,
                candidate_name=seed.demo_candidate_name,
            )

    if session is None:
        logger.info("No session found for token %s", token)
        raise NotFound('Invalid access token')

    if session.status == 'completed':
        raise AlreadyCompleted('This interview has already been completed')

    return session


def start(session_id):
    # No guard against a second start: started_at is simply re-stamped.
    session = get_session(session_id)
    session.status = 'in_progress'
    session.started_at = utcnow()
    commit_or_rollback('start interview')
    logger.info("Session %s started", session_id)
    return session


def complete(session_id):
    session = get_session(session_id)
    session.status = 'completed'
    session.completed_at = utcnow()
    commit_or_rollback('complete interview')
    logger.info("Session %s completed", session_id)
    return session


def get_questions(interview_id):
    questions = (
        Question.query
        .filter_by(interview_id=interview_id)
        .order_by(Question.order_index)
        .all()
    )
    return [q.to_dict() for q in questions]


def get_questions_for_token(token):
    session = InterviewSession.query.filter_by(access_token=token).first() if token else None
    if session is None:
        raise NotFound('Invalid session token')
    return {
        'session': serialize_session(session, include_candidate=False),
        'questions': get_questions(session.interview_id),
    }


def create_preview_session(interview_id):
    """Start an in-progress session an admin can use to walk through an interview."""
    if db.session.get(Interview, interview_id) is None:
        raise NotFound('Interview not found')
    token = f"preview-{int(time.time() * 1000)}"
    return create_session(interview_id, token, status='in_progress')


def create_demo_session():
    seed = _seed()
    if db.session.get(Interview, seed.demo_interview_id) is None:
        raise NotFound('Demo interview not found')
    return create_session(
        seed.demo_interview_id,
        generate_access_token(),
        candidate_email=seed.demo_candidate_email,
        candidate_name=seed.demo_candidate_name,
    )


def serialize_session(session, include_candidate=True):
    interview = session.interview
    data = {
        'id': session.id,
        'interview_id': session.interview_id,
        'interview_title': interview.title if interview else None,
        'interview_description': interview.description if interview else None,
        'instructions': interview.instructions if interview else None,
        'thank_you_message': interview.thank_you_message if interview else None,
        'status': session.status,
    }
    if include_candidate:
        data.update({
            'candidate_email': session.candidate_email,
            'candidate_name': session.candidate_name,
            'access_token': session.access_token,
        })
    return data
