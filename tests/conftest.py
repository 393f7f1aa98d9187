import os
import sys
import pytest

# Ensure repo root is on sys.path so tests can import top-level modules (e.g., interview_logic.py)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Ensure env for create_app
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from app import create_app  # noqa: E402
from extensions import db  # noqa: E402


@pytest.fixture()
def app():
    application = create_app({'TESTING': True})
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def ctx(app):
    """Application context for calling domain functions directly."""
    with app.app_context():
        yield app.config['SEED']


@pytest.fixture()
def stub_email(monkeypatch):
    # Prevent real HTTP for sending emails; records every message instead
    import utilities.email as uemail
    sent = []

    def _fake_send(to_email, subject, html):
        sent.append({'to': to_email, 'subject': subject, 'html': html})
        return True, None

    monkeypatch.setattr(uemail, 'send_email', _fake_send)
    yield sent


@pytest.fixture()
def stub_blob(monkeypatch):
    # Keep uploads off the network; returns a deterministic blob URL
    import utilities.storage as ustorage
    uploads = []

    def _fake_upload(data, path, content_type='application/octet-stream'):
        uploads.append({'path': path, 'content_type': content_type, 'size': len(data)})
        return {'url': f'https://blob.example.com/{path}', 'pathname': path, 'size': len(data)}

    monkeypatch.setattr(ustorage, 'upload', _fake_upload)
    yield uploads


@pytest.fixture()
def make_interview(ctx):
    """Build an interview with one question of each type and return (interview, questions by type)."""
    import interviews

    def _make(title='Backend Engineer'):
        interview = interviews.create_interview(title, description='Screening')
        created = interviews.save_questions(interview.id, [
            {'type': 'multiple_choice', 'title': 'Pick one', 'options': [
                {'option_text': 'A', 'is_correct': True},
                {'option_text': 'B', 'is_correct': False},
            ]},
            {'type': 'text', 'title': 'Tell us about yourself'},
            {'type': 'coding', 'title': 'Reverse a string'},
            {'type': 'video', 'title': 'Introduce yourself on camera'},
            {'type': 'file-upload', 'title': 'Upload your resume'},
        ])
        return interview, {q.type: q for q in created}

    return _make
