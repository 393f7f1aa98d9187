import uuid
from datetime import datetime, timezone
from extensions import db

# Note: The db instance is created in extensions.py
# and initialized in the app factory to avoid circular imports.


def new_id():
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp, matching what the database hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Organization(db.Model):
    __tablename__ = 'organizations'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    domain = db.Column(db.String(255), nullable=True)
    settings = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, default=utcnow)


class User(db.Model):
    """An admin (owner/admin/editor) or candidate account."""
    __tablename__ = 'users'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(20), default='candidate')
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'role': self.role,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


class Interview(db.Model):
    """An interview authored by an admin; owns its questions."""
    __tablename__ = 'interviews'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    organization_id = db.Column(db.String(36), db.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=True)
    created_by = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    status = db.Column(db.String(20), default='draft')
    settings = db.Column(db.JSON, default=dict)
    instructions = db.Column(db.Text, nullable=True)
    thank_you_message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    questions = db.relationship('Question', backref='interview', lazy=True,
                                order_by='Question.order_index')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description or '',
            'organization_id': self.organization_id,
            'created_by': self.created_by,
            'status': self.status,
            'settings': self.settings or {},
            'instructions': self.instructions or '',
            'thank_you_message': self.thank_you_message or '',
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Interview {self.id} {self.title!r}>'


class Question(db.Model):
    __tablename__ = 'questions'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    interview_id = db.Column(db.String(36), db.ForeignKey('interviews.id', ondelete='CASCADE'), nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    order_index = db.Column(db.Integer, nullable=False)
    required = db.Column(db.Boolean, default=True)
    time_limit = db.Column(db.Integer, nullable=True)  # seconds
    settings = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, default=utcnow)

    options = db.relationship('QuestionOption', backref='question', lazy=True,
                              order_by='QuestionOption.order_index')

    def to_dict(self, include_options=True):
        data = {
            'id': self.id,
            'interview_id': self.interview_id,
            'type': self.type,
            'title': self.title,
            'description': self.description or '',
            'order_index': self.order_index,
            'required': bool(self.required),
            'time_limit': self.time_limit,
            'settings': self.settings or {},
            'created_at': _iso(self.created_at),
        }
        if include_options:
            data['options'] = [o.to_dict() for o in self.options]
        return data

    def __repr__(self):
        return f'<Question {self.order_index} ({self.type}) of Interview {self.interview_id}>'


class QuestionOption(db.Model):
    __tablename__ = 'question_options'
    __table_args__ = (db.UniqueConstraint('question_id', 'order_index'),)
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    question_id = db.Column(db.String(36), db.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False, index=True)
    option_text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, default=False)
    order_index = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'option_text': self.option_text,
            'is_correct': bool(self.is_correct),
            'order_index': self.order_index,
        }


class InterviewSession(db.Model):
    """One candidate's attempt at one interview, reached through an access token."""
    __tablename__ = 'interview_sessions'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    interview_id = db.Column(db.String(36), db.ForeignKey('interviews.id', ondelete='CASCADE'), nullable=False, index=True)
    candidate_email = db.Column(db.String(255), nullable=True)
    candidate_name = db.Column(db.String(255), nullable=True)
    access_token = db.Column(db.String(255), unique=True, nullable=True)
    status = db.Column(db.String(20), default='pending')  # pending|in_progress|completed
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.Text, nullable=True)
    browser_info = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    interview = db.relationship('Interview', backref=db.backref('sessions', lazy=True))

    @property
    def duration_seconds(self):
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0

    def __repr__(self):
        return f'<InterviewSession {self.id} [{self.status}]>'


class Response(db.Model):
    """A candidate's answer to one question; payload shape depends on question type."""
    __tablename__ = 'responses'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    session_id = db.Column(db.String(36), db.ForeignKey('interview_sessions.id', ondelete='CASCADE'), nullable=False, index=True)
    question_id = db.Column(db.String(36), db.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False, index=True)
    response_data = db.Column(db.JSON, nullable=False)
    time_spent = db.Column(db.Integer, default=0)  # seconds
    started_at = db.Column(db.DateTime, default=utcnow)
    submitted_at = db.Column(db.DateTime, default=utcnow)
    created_at = db.Column(db.DateTime, default=utcnow)

    question = db.relationship('Question')
    files = db.relationship('UploadedFile', backref='response', lazy=True)

    def __repr__(self):
        return f'<Response {self.id} for Question {self.question_id}>'


class UploadedFile(db.Model):
    __tablename__ = 'uploaded_files'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    response_id = db.Column(db.String(36), db.ForeignKey('responses.id', ondelete='CASCADE'), nullable=False, index=True)
    filename = db.Column(db.String(255), nullable=False)
    original_filename = db.Column(db.String(255), nullable=True)
    file_size = db.Column(db.BigInteger, default=0)
    mime_type = db.Column(db.String(100), nullable=True)
    storage_path = db.Column(db.Text, nullable=False)
    storage_provider = db.Column(db.String(50), default='blob')
    upload_status = db.Column(db.String(20), default='pending')
    created_at = db.Column(db.DateTime, default=utcnow)


class TrackingEvent(db.Model):
    """Append-only behavioral signal (keystroke, paste, focus change, ...)."""
    __tablename__ = 'tracking_events'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    session_id = db.Column(db.String(36), db.ForeignKey('interview_sessions.id', ondelete='CASCADE'), nullable=False, index=True)
    question_id = db.Column(db.String(36), db.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False, index=True)
    event_type = db.Column(db.String(50), nullable=False)
    event_data = db.Column(db.JSON, nullable=False, default=dict)
    timestamp = db.Column(db.DateTime, default=utcnow)


def _iso(value):
    return value.isoformat() if value else None
