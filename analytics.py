"""Read-only interview analytics and CSV export.

Everything here is computed from four scans of one interview's rows
(sessions, responses, questions, tracking events); nothing is written back.
"""
import csv
import io
import logging
import re
from collections import Counter
from datetime import date
from extensions import db
from sqlalchemy import func
from models import Interview, InterviewSession, Question, QuestionOption, Response, TrackingEvent, UploadedFile
from utilities.constants import (
    CHARS_PER_WORD,
    CSV_HEADERS,
    ERASE_KEYS,
    TEXT_LENGTH_BUCKETS,
    normalize_question_type,
)
from utilities.errors import NotFound
from utilities.formatting import format_csv_number

logger = logging.getLogger(__name__)


# --- Scans ---------------------------------------------------------------

def _get_interview(interview_id):
    interview = db.session.get(Interview, interview_id) if interview_id else None
    if interview is None:
        raise NotFound('Interview not found')
    return interview


def _sessions(interview_id):
    return (
        InterviewSession.query
        .filter_by(interview_id=interview_id)
        .order_by(InterviewSession.created_at.desc())
        .all()
    )


def _responses(interview_id):
    """Responses for the interview, keeping only the latest per (session, question).

    Duplicate submissions are stored as separate rows; the most recent one is
    the answer that counts.
    """
    rows = (
        Response.query
        .join(Question, Response.question_id == Question.id)
        .filter(Question.interview_id == interview_id)
        .order_by(Response.created_at, Response.submitted_at)
        .all()
    )
    latest = {}
    for row in rows:
        latest[(row.session_id, row.question_id)] = row
    return list(latest.values())


def _questions(interview_id):
    return (
        Question.query
        .filter_by(interview_id=interview_id)
        .order_by(Question.order_index)
        .all()
    )


def _tracking_events(interview_id):
    return (
        TrackingEvent.query
        .join(Question, TrackingEvent.question_id == Question.id)
        .filter(Question.interview_id == interview_id)
        .all()
    )


def upload_volume(interview_id):
    """Total bytes of files uploaded in answer to this interview's questions."""
    total = (
        db.session.query(func.coalesce(func.sum(UploadedFile.file_size), 0))
        .select_from(UploadedFile)
        .join(Response, UploadedFile.response_id == Response.id)
        .join(Question, Response.question_id == Question.id)
        .filter(Question.interview_id == interview_id)
        .scalar()
    )
    return int(total or 0)


# --- Aggregates ----------------------------------------------------------

def average_completion_time(sessions):
    durations = [
        (s.completed_at - s.started_at).total_seconds()
        for s in sessions
        if s.status == 'completed' and s.started_at and s.completed_at
    ]
    if not durations:
        return 0
    return sum(durations) / len(durations)


def abandonment_rate(total_sessions, completed_sessions):
    if total_sessions == 0:
        return 0
    return (total_sessions - completed_sessions) / total_sessions * 100


def text_length_bucket(text):
    word_count = len((text or '').split())
    if word_count == 0:
        return 'empty'
    for label, upper in TEXT_LENGTH_BUCKETS:
        if word_count <= upper:
            return label
    return 'long'


def response_bucket(question_type, response_data):
    """Distribution label for one response; each response lands in exactly one bucket."""
    data = response_data if isinstance(response_data, dict) else {}
    question_type = normalize_question_type(question_type)

    if question_type == 'multiple_choice':
        return data.get('selected_option_text') or 'No answer'
    if question_type == 'text':
        return text_length_bucket(data.get('text'))
    if question_type == 'coding':
        language = data.get('language') or 'unknown'
        code = data.get('code') or ''
        return f"{language} (completed)" if code.strip() else f"{language} (empty)"
    if question_type == 'video':
        return 'recorded' if data.get('file_url') else 'no_recording'
    if question_type == 'file_upload':
        return 'uploaded' if data.get('file_url') else 'no_file'
    return 'other'


def response_distribution(question_type, responses):
    return dict(Counter(response_bucket(question_type, r.response_data) for r in responses))


def keystroke_stats(events):
    keystrokes = [e for e in events if e.event_type == 'keystroke']
    total = len(keystrokes)
    erased = sum(1 for e in keystrokes if (e.event_data or {}).get('key') in ERASE_KEYS)
    return {
        'total_keystrokes': total,
        'backspace_ratio': erased / total * 100 if total else 0,
        # Rough words-per-minute estimate; not normalized by elapsed time.
        'average_typing_speed': max(0, (total - erased) / CHARS_PER_WORD) if total else 0,
        'paste_events': sum(1 for e in events if e.event_type == 'paste'),
        'focus_changes': sum(1 for e in events if e.event_type == 'focus_change'),
    }


def _iso(value):
    return value.isoformat() if value else ''


def compute_interview_analytics(interview_id):
    interview = _get_interview(interview_id)
    sessions = _sessions(interview_id)
    responses = _responses(interview_id)
    questions = _questions(interview_id)
    events = _tracking_events(interview_id)
    logger.info(
        "Analytics for interview %s: %d sessions, %d responses, %d questions, %d events",
        interview_id, len(sessions), len(responses), len(questions), len(events),
    )

    total_sessions = len(sessions)
    completed_sessions = sum(1 for s in sessions if s.status == 'completed')

    responses_by_question = {}
    responses_by_session = Counter()
    for r in responses:
        responses_by_question.setdefault(r.question_id, []).append(r)
        responses_by_session[r.session_id] += 1

    events_by_question = {}
    for e in events:
        events_by_question.setdefault(e.question_id, []).append(e)

    questions_data = []
    keystroke_data = []
    for q in questions:
        q_responses = responses_by_question.get(q.id, [])
        count = len(q_responses)
        questions_data.append({
            'id': q.id,
            'title': q.title,
            'type': q.type,
            'order_index': q.order_index,
            'total_responses': count,
            'average_time_spent': sum(r.time_spent or 0 for r in q_responses) / count if count else 0,
            'completion_rate': count / total_sessions * 100 if total_sessions else 0,
            'response_distribution': response_distribution(q.type, q_responses),
        })
        keystroke_data.append({
            'question_id': q.id,
            'question_title': q.title,
            **keystroke_stats(events_by_question.get(q.id, [])),
        })

    sessions_data = [
        {
            'id': s.id,
            'candidate_email': s.candidate_email or 'Unknown',
            'candidate_name': s.candidate_name or '',
            'status': s.status,
            'started_at': _iso(s.started_at),
            'completed_at': _iso(s.completed_at),
            'total_time': s.duration_seconds,
            'responses_count': responses_by_session[s.id],
        }
        for s in sessions
    ]

    return {
        'interview': {
            'id': interview.id,
            'title': interview.title,
            'description': interview.description or '',
            'total_sessions': total_sessions,
            'completed_sessions': completed_sessions,
            'average_completion_time': average_completion_time(sessions),
            'abandonment_rate': abandonment_rate(total_sessions, completed_sessions),
        },
        'questions': questions_data,
        'sessions': sessions_data,
        'keystroke_analytics': keystroke_data,
    }


def _multiple_choice_details(question, response_data):
    selected_id = (response_data or {}).get('selected_option_id')
    if not selected_id:
        return None
    selected = db.session.get(QuestionOption, selected_id)
    if selected is None or selected.question_id != question.id:
        return None
    correct = next((o for o in question.options if o.is_correct), None)
    return {
        'selected_option_text': response_data.get('selected_option_text') or selected.option_text,
        'selected_option_id': selected_id,
        'is_correct': bool(selected.is_correct),
        'correct_answer': correct.option_text if correct else None,
    }


def get_session_details(session_id):
    session = db.session.get(InterviewSession, session_id) if session_id else None
    if session is None:
        raise NotFound('Session not found')

    responses = (
        Response.query
        .join(Question, Response.question_id == Question.id)
        .filter(Response.session_id == session_id)
        .order_by(Question.order_index, Response.created_at)
        .all()
    )
    details = []
    for r in responses:
        question = r.question
        item = {
            'id': r.id,
            'question_id': r.question_id,
            'question_title': question.title if question else 'Unknown Question',
            'question_type': question.type if question else 'unknown',
            'response_data': r.response_data,
            'time_spent': r.time_spent or 0,
        }
        if question is not None and normalize_question_type(question.type) == 'multiple_choice':
            mc = _multiple_choice_details(question, r.response_data)
            if mc:
                item['multiple_choice_details'] = mc
        details.append(item)

    return {
        'session': {
            'id': session.id,
            'candidate_email': session.candidate_email or 'Unknown',
            'candidate_name': session.candidate_name or '',
            'status': session.status,
            'started_at': _iso(session.started_at),
            'completed_at': _iso(session.completed_at),
            'total_time': session.duration_seconds,
        },
        'responses': details,
    }


# --- Export --------------------------------------------------------------

def export_filename(title, today=None):
    today = today or date.today()
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}_sessions_{today.isoformat()}.csv"


def export_sessions(interview_id):
    """Return ``(csv_text, filename)`` with one quoted row per session."""
    interview = _get_interview(interview_id)
    sessions = _sessions(interview_id)
    responses_by_session = Counter(r.session_id for r in _responses(interview_id))

    buf = io.StringIO()
    csv.writer(buf, lineterminator='\n').writerow(CSV_HEADERS)
    rows = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for s in sessions:
        rows.writerow([
            s.id,
            s.candidate_email or '',
            s.candidate_name or '',
            s.status,
            _iso(s.started_at),
            _iso(s.completed_at),
            format_csv_number(s.duration_seconds),
            responses_by_session[s.id],
            100 if s.status == 'completed' else 0,
        ])

    logger.info("Exported %d sessions for interview %s", len(sessions), interview_id)
    return buf.getvalue().rstrip('\n'), export_filename(interview.title)
