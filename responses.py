"""Recording candidate answers and tracking events.

Each question type has its own payload shape. Payloads are parsed into one of
the dataclasses below before anything touches the database, so a malformed
answer is rejected with a ValidationError instead of being stored as-is.
"""
import logging
from dataclasses import dataclass, asdict, field
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import InterviewSession, Question, Response, TrackingEvent, UploadedFile
from utilities.constants import FILE_QUESTION_TYPES, QUESTION_TYPES, normalize_question_type
from utilities.errors import NotFound, StorageError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class MultipleChoiceAnswer:
    # Both fields stay None when the timer ran out before a choice was made
    selected_option_id: Optional[str] = None
    selected_option_text: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict):
        option_id = d.get('selected_option_id') or None
        option_text = d.get('selected_option_text') or None
        for value in (option_id, option_text):
            if value is not None and not isinstance(value, str):
                raise ValidationError('Selected option must be a string')
        return cls(selected_option_id=option_id, selected_option_text=option_text)


@dataclass
class TextAnswer:
    text: str = ''
    word_count: int = 0
    character_count: int = 0
    keystroke_log: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict):
        text = d.get('text') or ''
        if not isinstance(text, str):
            raise ValidationError('Text answer must be a string')
        keystroke_log = d.get('keystroke_log') or []
        if not isinstance(keystroke_log, list):
            raise ValidationError('keystroke_log must be a list')
        word_count = d.get('word_count')
        character_count = d.get('character_count')
        return cls(
            text=text,
            word_count=int(word_count) if word_count is not None else len(text.split()),
            character_count=int(character_count) if character_count is not None else len(text),
            keystroke_log=keystroke_log,
        )

    def to_dict(self):
        data = asdict(self)
        if not self.keystroke_log:
            data.pop('keystroke_log')
        return data


@dataclass
class CodingAnswer:
    code: str = ''
    language: str = 'unknown'

    @classmethod
    def from_dict(cls, d: dict):
        code = d.get('code') or ''
        if not isinstance(code, str):
            raise ValidationError('Code answer must be a string')
        return cls(code=code, language=d.get('language') or 'unknown')


@dataclass
class FileAnswer:
    """Video recordings and file uploads; the file is already in blob storage."""
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict):
        size = d.get('file_size')
        return cls(
            file_url=d.get('file_url') or None,
            file_name=d.get('file_name') or None,
            file_size=int(size) if size not in (None, '') else None,
            mime_type=d.get('mime_type') or None,
        )

    def to_dict(self):
        return {k: v for k, v in asdict(self).items() if v is not None}


ANSWER_TYPES = {
    'multiple_choice': MultipleChoiceAnswer,
    'text': TextAnswer,
    'coding': CodingAnswer,
    'video': FileAnswer,
    'file_upload': FileAnswer,
}


def parse_response_data(question_type, response_data):
    """Validate a raw payload and return the matching answer dataclass."""
    question_type = normalize_question_type(question_type)
    if question_type not in QUESTION_TYPES:
        raise ValidationError(f'Unknown question type: {question_type}')
    if response_data is None:
        response_data = {}
    if not isinstance(response_data, dict):
        raise ValidationError('Response data must be an object')
    try:
        return ANSWER_TYPES[question_type].from_dict(response_data)
    except (TypeError, ValueError) as e:
        raise ValidationError(f'Invalid {question_type} response: {e}') from e


def answer_to_dict(answer):
    if hasattr(answer, 'to_dict'):
        return answer.to_dict()
    return asdict(answer)


def submit(session_id, question_id, response_data, time_spent=0, question_type=None):
    """Store one answer, plus an UploadedFile row for file answers carrying a URL.

    Both rows are written in one transaction. On a database failure nothing is
    stored and StorageError is raised so the caller can retry with the same
    payload.
    """
    if not session_id or not question_id:
        raise ValidationError('Session ID and question ID are required.')

    session = db.session.get(InterviewSession, session_id)
    if session is None:
        raise NotFound('Session not found')
    question = db.session.get(Question, question_id)
    if question is None:
        raise NotFound('Question not found')
    if question.interview_id != session.interview_id:
        raise ValidationError('Question does not belong to this interview')

    question_type = normalize_question_type(question_type or question.type)
    answer = parse_response_data(question_type, response_data)
    payload = answer_to_dict(answer)

    try:
        time_spent = max(0, int(time_spent or 0))
    except (TypeError, ValueError):
        raise ValidationError('time_spent must be a number of seconds')

    logger.info("Saving %s response for session %s, question %s", question_type, session_id, question_id)
    logger.debug("Response data: %s", payload)

    try:
        response = Response(
            session_id=session_id,
            question_id=question_id,
            response_data=payload,
            time_spent=time_spent,
        )
        db.session.add(response)
        db.session.flush()  # need response.id for the file row

        if question_type in FILE_QUESTION_TYPES and answer.file_url:
            db.session.add(UploadedFile(
                response_id=response.id,
                filename=answer.file_name or 'uploaded_file',
                original_filename=answer.file_name or 'uploaded_file',
                file_size=answer.file_size or 0,
                mime_type=answer.mime_type or 'application/octet-stream',
                storage_path=answer.file_url,
                storage_provider='blob',
                upload_status='completed',
            ))

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Failed to save response for session %s: %s", session_id, e)
        raise StorageError('Failed to save response') from e

    logger.info("Response saved with ID %s", response.id)
    return response


def track_event(session_id, question_id, event_type, event_data=None):
    if not session_id or not question_id or not event_type:
        raise ValidationError('Session ID, question ID and event type are required.')
    if event_data is not None and not isinstance(event_data, dict):
        raise ValidationError('Event data must be an object')
    if db.session.get(InterviewSession, session_id) is None:
        raise NotFound('Session not found')
    if db.session.get(Question, question_id) is None:
        raise NotFound('Question not found')

    event = TrackingEvent(
        session_id=session_id,
        question_id=question_id,
        event_type=event_type,
        event_data=event_data or {},
    )
    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Failed to save tracking event %s: %s", event_type, e)
        raise StorageError('Failed to save tracking event') from e
    return event
