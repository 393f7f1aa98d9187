import logging
from flask import Blueprint, Response as HttpResponse, jsonify, request
from werkzeug.exceptions import HTTPException
import admin_users
import analytics
import interview_logic
import interviews
import responses
import sharing
from utilities import storage
from utilities.errors import AppError, ValidationError
from utilities.validators import require_fields

logger = logging.getLogger(__name__)

# Create a Flask Blueprint to organize routes
main_bp = Blueprint('main', __name__, url_prefix='/api')


def init_app(app):
    """Registers the blueprint with the Flask app."""
    app.register_blueprint(main_bp)


@main_bp.errorhandler(AppError)
def handle_app_error(error):
    if error.status_code >= 500:
        logger.error("%s: %s", type(error).__name__, error.message)
    return jsonify({'success': False, 'error': error.message}), error.status_code


@main_bp.errorhandler(Exception)
def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return jsonify({'success': False, 'error': error.description}), error.code
    logger.exception("Unhandled error in %s %s", request.method, request.path)
    return jsonify({'success': False, 'error': 'Internal server error'}), 500


def ok(data=None, status=200):
    return jsonify({'success': True, 'data': data}), status


def _json():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _require(data, *names):
    missing = require_fields(data, *names)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _current_user_email(data=None):
    """Owner checks use the caller's email, sent as a header or in the body."""
    return request.headers.get('X-User-Email') or (data or {}).get('current_user_email')


# === Candidate Flow ===

@main_bp.route('/sessions/validate', methods=['POST'])
def validate_token():
    """Resolves an access token to its session (creating demo sessions on first use)."""
    data = _json()
    session = interview_logic.resolve_token(data.get('token'))
    return ok(interview_logic.serialize_session(session))


@main_bp.route('/sessions/demo', methods=['POST'])
def demo_session():
    session = interview_logic.create_demo_session()
    return ok(interview_logic.serialize_session(session), 201)


@main_bp.route('/sessions/<session_id>/start', methods=['POST'])
def start_session(session_id):
    session = interview_logic.start(session_id)
    return ok({'id': session.id, 'status': session.status, 'started_at': session.started_at.isoformat()})


@main_bp.route('/sessions/<session_id>/complete', methods=['POST'])
def complete_session(session_id):
    session = interview_logic.complete(session_id)
    return ok({'id': session.id, 'status': session.status, 'completed_at': session.completed_at.isoformat()})


@main_bp.route('/sessions/by-token/<token>/questions', methods=['GET'])
def questions_for_token(token):
    return ok(interview_logic.get_questions_for_token(token))


@main_bp.route('/interviews/<interview_id>/questions', methods=['GET'])
def questions_for_interview(interview_id):
    return ok(interview_logic.get_questions(interview_id))


@main_bp.route('/responses', methods=['POST'])
def submit_response():
    """Stores one answer.

    Expects 'session_id', 'question_id' and 'response_data'; 'time_spent'
    (seconds) and 'question_type' are optional.
    """
    data = _json()
    _require(data, 'session_id', 'question_id')
    response = responses.submit(
        data['session_id'],
        data['question_id'],
        data.get('response_data'),
        time_spent=data.get('time_spent', 0),
        question_type=data.get('question_type'),
    )
    return ok({'id': response.id, 'response_data': response.response_data}, 201)


@main_bp.route('/tracking-events', methods=['POST'])
def submit_tracking_event():
    data = _json()
    event = responses.track_event(
        data.get('session_id'),
        data.get('question_id'),
        data.get('event_type'),
        data.get('event_data'),
    )
    return ok({'id': event.id}, 201)


def _uploaded_file():
    upload = request.files.get('file')
    if upload is None:
        raise ValidationError('No file provided')
    session_id = request.form.get('session_id')
    question_id = request.form.get('question_id')
    if not session_id or not question_id:
        raise ValidationError('Session ID and question ID are required.')
    return upload, session_id, question_id


@main_bp.route('/uploads/video', methods=['POST'])
def upload_video():
    upload, session_id, question_id = _uploaded_file()
    return ok(storage.upload_video(upload.read(), session_id, question_id), 201)


@main_bp.route('/uploads/file', methods=['POST'])
def upload_file():
    upload, session_id, question_id = _uploaded_file()
    result = storage.upload_file(
        upload.read(),
        session_id,
        question_id,
        upload.filename,
        content_type=upload.mimetype or 'application/octet-stream',
    )
    return ok(result, 201)


# === Interview Authoring ===

@main_bp.route('/interviews', methods=['GET'])
def list_interviews():
    return ok(interviews.list_interviews(request.args.get('organization_id')))


@main_bp.route('/interviews', methods=['POST'])
def create_interview():
    data = _json()
    interview = interviews.create_interview(
        data.get('title'),
        description=data.get('description', ''),
        instructions=data.get('instructions', ''),
        thank_you_message=data.get('thank_you_message', ''),
    )
    return ok(interview.to_dict(), 201)


@main_bp.route('/interviews/<interview_id>', methods=['GET'])
def get_interview(interview_id):
    return ok(interviews.get_interview(interview_id))


@main_bp.route('/interviews/<interview_id>', methods=['PUT'])
def update_interview(interview_id):
    return ok(interviews.update_interview(interview_id, _json()))


@main_bp.route('/interviews/<interview_id>', methods=['DELETE'])
def delete_interview(interview_id):
    interviews.delete_interview(interview_id)
    return ok({'id': interview_id})


@main_bp.route('/interviews/<interview_id>/questions', methods=['POST'])
def save_questions(interview_id):
    data = _json()
    questions = data.get('questions')
    if not isinstance(questions, list):
        raise ValidationError('questions must be a list')
    created = interviews.save_questions(interview_id, questions)
    return ok([q.to_dict() for q in created], 201)


@main_bp.route('/questions/<question_id>/options', methods=['PUT'])
def set_question_options(question_id):
    data = _json()
    count = interviews.set_question_options(question_id, data.get('options'))
    return ok({'question_id': question_id, 'options': count})


@main_bp.route('/interviews/<interview_id>/preview', methods=['POST'])
def preview_interview(interview_id):
    session = interview_logic.create_preview_session(interview_id)
    return ok(interview_logic.serialize_session(session), 201)


# === Sharing ===

@main_bp.route('/interviews/<interview_id>/share-links', methods=['POST'])
def create_share_link(interview_id):
    data = _json()
    link = sharing.issue_share_token(
        interview_id,
        max_uses=data.get('max_uses', 1),
        expires_in_days=data.get('expires_in_days', 7),
    )
    return ok(link, 201)


@main_bp.route('/interviews/<interview_id>/share-links', methods=['GET'])
def list_share_links(interview_id):
    return ok(sharing.list_share_links(interview_id))


@main_bp.route('/share-links/<session_id>', methods=['DELETE'])
def delete_share_link(session_id):
    sharing.delete_share_link(session_id)
    return ok({'id': session_id})


@main_bp.route('/interviews/<interview_id>/invites', methods=['POST'])
def send_invites(interview_id):
    """Sends email invites; stops at the first failed address.

    A partial failure still reports the invites that went out, alongside the
    error and the address that failed.
    """
    data = _json()
    result = sharing.issue_email_invites(
        interview_id,
        data.get('emails'),
        data.get('subject'),
        data.get('message'),
    )
    if not result.success:
        return jsonify({'success': False, 'error': result.error, 'data': result.to_dict()}), 502
    return ok(result.to_dict())


# === Analytics ===

@main_bp.route('/interviews/<interview_id>/analytics', methods=['GET'])
def interview_analytics(interview_id):
    return ok(analytics.compute_interview_analytics(interview_id))


@main_bp.route('/sessions/<session_id>/details', methods=['GET'])
def session_details(session_id):
    return ok(analytics.get_session_details(session_id))


@main_bp.route('/interviews/<interview_id>/export', methods=['GET'])
def export_sessions(interview_id):
    csv_text, filename = analytics.export_sessions(interview_id)
    if request.args.get('format') == 'json':
        return ok({'csv': csv_text, 'filename': filename})
    return HttpResponse(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


# === Admin Accounts ===

@main_bp.route('/auth/login', methods=['POST'])
def login():
    data = _json()
    _require(data, 'email', 'password')
    user = admin_users.authenticate_user(data['email'], data['password'], data.get('user_type', 'admin'))
    return ok(user)


@main_bp.route('/admin/users', methods=['GET'])
def list_admin_users():
    return ok(admin_users.list_admin_users())


@main_bp.route('/admin/users', methods=['POST'])
def create_admin_user():
    data = _json()
    user = admin_users.create_admin_user(data, _current_user_email(data))
    return ok(user, 201)


@main_bp.route('/admin/users/<user_id>', methods=['PUT'])
def update_admin_user(user_id):
    data = _json()
    return ok(admin_users.update_admin_user(user_id, data, _current_user_email(data)))


@main_bp.route('/admin/users/<user_id>', methods=['DELETE'])
def delete_admin_user(user_id):
    admin_users.delete_admin_user(user_id, _current_user_email(_json()))
    return ok({'id': user_id})
