"""Admin-side interview authoring: create, edit, question sets and deletion.

Multi-row changes (question batches, full edits, deletion) run inside a single
transaction and are rolled back as a whole if any statement fails.
"""
import logging
from contextlib import contextmanager
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import (
    Interview,
    InterviewSession,
    Question,
    QuestionOption,
    Response,
    TrackingEvent,
    UploadedFile,
)
from utilities.constants import INTERVIEW_STATUSES, QUESTION_TYPES, normalize_question_type
from utilities.errors import NotFound, StorageError, ValidationError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(action):
    """Commit everything done in the block, or roll all of it back."""
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Database error while trying to %s: %s", action, e)
        raise StorageError(f"Failed to {action}") from e
    except Exception:
        db.session.rollback()
        raise


def _get_interview(interview_id):
    interview = db.session.get(Interview, interview_id) if interview_id else None
    if interview is None:
        raise NotFound('Interview not found')
    return interview


def create_interview(title, description='', instructions='', thank_you_message=''):
    if not title or not title.strip():
        raise ValidationError('Title is required')
    seed = current_app.config['SEED']
    interview = Interview(
        title=title.strip(),
        description=description,
        instructions=instructions,
        thank_you_message=thank_you_message,
        organization_id=seed.organization_id,
        created_by=seed.admin_user_id,
        status='draft',
    )
    with transaction('create interview'):
        db.session.add(interview)
    logger.info("Created interview %s (%s)", interview.id, interview.title)
    return interview


def list_interviews(organization_id=None):
    """Interviews for one organization, newest first, with question and completed-session counts."""
    organization_id = organization_id or current_app.config['SEED'].organization_id
    question_counts = dict(
        db.session.query(Question.interview_id, func.count(Question.id))
        .group_by(Question.interview_id)
        .all()
    )
    completed_counts = dict(
        db.session.query(InterviewSession.interview_id, func.count(InterviewSession.id))
        .filter(InterviewSession.status == 'completed')
        .group_by(InterviewSession.interview_id)
        .all()
    )
    interviews = (
        Interview.query
        .filter_by(organization_id=organization_id)
        .order_by(Interview.created_at.desc())
        .all()
    )
    result = []
    for interview in interviews:
        data = interview.to_dict()
        data['question_count'] = question_counts.get(interview.id, 0)
        data['response_count'] = completed_counts.get(interview.id, 0)
        result.append(data)
    return result


def get_interview(interview_id):
    interview = _get_interview(interview_id)
    data = interview.to_dict()
    data['questions'] = [q.to_dict() for q in interview.questions]
    return data


def _clean_options(options):
    """Accept plain strings or {option_text, is_correct} objects."""
    cleaned = []
    for option in options or []:
        if isinstance(option, str):
            text, is_correct = option, False
        elif isinstance(option, dict):
            text, is_correct = option.get('option_text'), bool(option.get('is_correct', False))
        else:
            raise ValidationError('Options must be strings or objects')
        if not text or not str(text).strip():
            raise ValidationError('Option text is required')
        cleaned.append((str(text).strip(), is_correct))
    return cleaned


def _add_options(question, options):
    cleaned = _clean_options(options)
    for index, (text, is_correct) in enumerate(cleaned, start=1):
        db.session.add(QuestionOption(
            question_id=question.id,
            option_text=text,
            is_correct=is_correct,
            order_index=index,
        ))
    correct = sum(1 for _, is_correct in cleaned if is_correct)
    if cleaned and correct != 1:
        logger.warning("Question %s has %d correct options; expected exactly one", question.id, correct)
    return len(cleaned)


def _add_question(interview_id, data, order_index):
    if not isinstance(data, dict):
        raise ValidationError('Each question must be an object')
    question_type = normalize_question_type(data.get('type'))
    if question_type not in QUESTION_TYPES:
        raise ValidationError(f"Unknown question type: {data.get('type')}")
    title = (data.get('title') or '').strip()
    if not title:
        raise ValidationError('Question title is required')

    time_limit = data.get('time_limit', data.get('timeLimit'))
    try:
        time_limit = int(time_limit) if time_limit not in (None, '') else None
    except (TypeError, ValueError):
        raise ValidationError('time_limit must be a number of seconds')
    question = Question(
        interview_id=interview_id,
        type=question_type,
        title=title,
        description=data.get('description') or '',
        order_index=order_index,
        required=bool(data.get('required', True)),
        time_limit=time_limit,
        settings=data.get('settings') or {},
    )
    db.session.add(question)
    db.session.flush()  # need question.id for its options

    if question_type == 'multiple_choice':
        if not _add_options(question, data.get('options')):
            logger.warning("Multiple choice question %r has no options", title)
    return question


def save_questions(interview_id, questions):
    """Append questions after the interview's current last question."""
    _get_interview(interview_id)
    last = (
        db.session.query(func.max(Question.order_index))
        .filter(Question.interview_id == interview_id)
        .scalar()
    ) or 0
    with transaction('save questions'):
        created = [
            _add_question(interview_id, data, last + i)
            for i, data in enumerate(questions or [], start=1)
        ]
    logger.info("Saved %d questions for interview %s", len(created), interview_id)
    return created


def _delete_questions(question_ids):
    if not question_ids:
        return
    QuestionOption.query.filter(QuestionOption.question_id.in_(question_ids)).delete(synchronize_session=False)
    Question.query.filter(Question.id.in_(question_ids)).delete(synchronize_session=False)


def update_interview(interview_id, data):
    """Update interview fields and, when ``questions`` is given, replace the whole question set."""
    interview = _get_interview(interview_id)
    title = data.get('title', interview.title)
    if not title or not title.strip():
        raise ValidationError('Title is required')
    status = data.get('status', interview.status)
    if status not in INTERVIEW_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(INTERVIEW_STATUSES)}")

    with transaction('update interview'):
        interview.title = title.strip()
        for name in ('description', 'instructions', 'thank_you_message', 'settings'):
            if name in data:
                setattr(interview, name, data[name])
        interview.status = status

        if data.get('questions') is not None:
            old_ids = [qid for (qid,) in db.session.query(Question.id).filter_by(interview_id=interview_id)]
            _delete_questions(old_ids)
            for i, question in enumerate(data['questions'], start=1):
                _add_question(interview_id, question, i)

    db.session.expire_all()
    logger.info("Updated interview %s", interview_id)
    return get_interview(interview_id)


def set_question_options(question_id, options):
    """Replace all options of a question."""
    question = db.session.get(Question, question_id) if question_id else None
    if question is None:
        raise NotFound('Question not found')
    with transaction('set question options'):
        QuestionOption.query.filter_by(question_id=question_id).delete(synchronize_session=False)
        count = _add_options(question, options)
    db.session.expire(question)
    return count


def delete_interview(interview_id):
    """Delete an interview and every row that hangs off it.

    Order: uploaded files, tracking events, responses, sessions, question
    options, questions, the interview itself. One transaction; a failure at
    any step leaves everything in place.
    """
    interview = _get_interview(interview_id)
    logger.info("Starting deletion of interview %s", interview_id)

    session_ids = [sid for (sid,) in db.session.query(InterviewSession.id).filter_by(interview_id=interview_id)]
    question_ids = [qid for (qid,) in db.session.query(Question.id).filter_by(interview_id=interview_id)]
    response_ids = [
        rid for (rid,) in db.session.query(Response.id).filter(Response.session_id.in_(session_ids))
    ] if session_ids else []

    with transaction('delete interview'):
        if response_ids:
            UploadedFile.query.filter(UploadedFile.response_id.in_(response_ids)).delete(synchronize_session=False)
        if session_ids:
            TrackingEvent.query.filter(TrackingEvent.session_id.in_(session_ids)).delete(synchronize_session=False)
            Response.query.filter(Response.session_id.in_(session_ids)).delete(synchronize_session=False)
            InterviewSession.query.filter(InterviewSession.id.in_(session_ids)).delete(synchronize_session=False)
        _delete_questions(question_ids)
        Interview.query.filter_by(id=interview.id).delete(synchronize_session=False)

    db.session.expire_all()
    logger.info("Deleted interview %s (%d sessions, %d questions)", interview_id, len(session_ids), len(question_ids))
