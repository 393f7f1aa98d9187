"""Demo rows: one organization, its owner account and a demo interview.

No sessions are seeded; demo tokens create theirs on first use.

Safe to run repeatedly; rows that already exist are left untouched.
"""
import logging
from extensions import db
from interview_logic import commit_or_rollback
from models import Interview, Organization, Question, QuestionOption, User
from admin_users import hash_password

logger = logging.getLogger(__name__)

DEMO_QUESTIONS = [
    {
        'id': '550e8400-e29b-41d4-a716-446655440003',
        'type': 'multiple_choice',
        'title': 'Which data structure gives O(1) average lookup by key?',
        'time_limit': 60,
        'options': [
            ('550e8400-e29b-41d4-a716-446655440020', 'Linked list', False),
            ('550e8400-e29b-41d4-a716-446655440021', 'Hash table', True),
            ('550e8400-e29b-41d4-a716-446655440022', 'Binary heap', False),
            ('550e8400-e29b-41d4-a716-446655440023', 'Sorted array', False),
        ],
    },
    {
        'id': '550e8400-e29b-41d4-a716-446655440004',
        'type': 'text',
        'title': 'Describe a project you are proud of and your role in it.',
        'time_limit': 300,
    },
    {
        'id': '550e8400-e29b-41d4-a716-446655440005',
        'type': 'coding',
        'title': 'Write a function that reverses a string.',
        'time_limit': 600,
        'settings': {'language': 'python'},
    },
    {
        'id': '550e8400-e29b-41d4-a716-446655440014',
        'type': 'multiple_choice',
        'title': 'Which HTTP status code means "Not Found"?',
        'time_limit': 30,
        'options': [
            ('550e8400-e29b-41d4-a716-446655440024', '200', False),
            ('550e8400-e29b-41d4-a716-446655440025', '301', False),
            ('550e8400-e29b-41d4-a716-446655440026', '404', True),
            ('550e8400-e29b-41d4-a716-446655440027', '500', False),
        ],
    },
]

EXTRA_INTERVIEWS = [
    ('550e8400-e29b-41d4-a716-446655440010', 'Frontend Developer Screen', 'draft'),
    ('550e8400-e29b-41d4-a716-446655440011', 'Customer Support Assessment', 'paused'),
]


def _add_if_missing(model, row_id, **fields):
    if db.session.get(model, row_id) is not None:
        return False
    db.session.add(model(id=row_id, **fields))
    return True


def seed_demo_data(seed):
    """Insert the demo rows described by ``seed`` (a SeedConfig)."""
    added = 0
    added += _add_if_missing(Organization, seed.organization_id, name='Demo Company', domain='example.com')
    if User.query.filter_by(email=seed.admin_email).first() is None:
        added += _add_if_missing(
            User, seed.admin_user_id,
            email=seed.admin_email,
            password_hash=hash_password(seed.admin_password),
            role='owner',
            first_name='Admin',
            last_name='User',
        )
    db.session.flush()

    added += _add_if_missing(
        Interview, seed.demo_interview_id,
        title='Software Engineer Interview',
        description='A short technical screen covering fundamentals and a coding task.',
        organization_id=seed.organization_id,
        created_by=seed.admin_user_id,
        status='active',
        instructions='Answer each question within its time limit.',
        thank_you_message='Thank you for completing the interview!',
    )
    for interview_id, title, status in EXTRA_INTERVIEWS:
        added += _add_if_missing(
            Interview, interview_id,
            title=title,
            organization_id=seed.organization_id,
            created_by=seed.admin_user_id,
            status=status,
        )
    db.session.flush()

    for index, q in enumerate(DEMO_QUESTIONS, start=1):
        added += _add_if_missing(
            Question, q['id'],
            interview_id=seed.demo_interview_id,
            type=q['type'],
            title=q['title'],
            order_index=index,
            required=True,
            time_limit=q['time_limit'],
            settings=q.get('settings', {}),
        )
        db.session.flush()
        for order, (option_id, text, is_correct) in enumerate(q.get('options', []), start=1):
            added += _add_if_missing(
                QuestionOption, option_id,
                question_id=q['id'],
                option_text=text,
                is_correct=is_correct,
                order_index=order,
            )

    commit_or_rollback('seed demo data')
    if added:
        logger.info("Seeded %d demo rows", added)
    return added
