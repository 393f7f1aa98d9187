import pytest
from sqlalchemy.exc import SQLAlchemyError

import interview_logic
import interviews
import responses
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
from utilities.errors import NotFound, StorageError, ValidationError


def _populate(make_interview):
    interview, questions = make_interview()
    session = interview_logic.create_session(interview.id, 'POPULATED')
    responses.submit(session.id, questions['text'].id, {'text': 'answer'})
    responses.submit(session.id, questions['file_upload'].id, {'file_url': 'https://blob/cv.pdf', 'file_name': 'cv.pdf'})
    responses.track_event(session.id, questions['text'].id, 'keystroke', {'key': 'a'})
    return interview


def test_create_interview_uses_seed_owner(ctx):
    interview = interviews.create_interview('  Data Engineer  ')
    assert interview.title == 'Data Engineer'
    assert interview.status == 'draft'
    assert interview.organization_id == ctx.organization_id
    assert interview.created_by == ctx.admin_user_id

    with pytest.raises(ValidationError):
        interviews.create_interview('   ')


def test_list_interviews_counts(make_interview):
    interview = _populate(make_interview)
    interview_logic.complete(InterviewSession.query.filter_by(access_token='POPULATED').one().id)

    listed = {i['id']: i for i in interviews.list_interviews()}
    assert listed[interview.id]['question_count'] == 5
    assert listed[interview.id]['response_count'] == 1


def test_save_questions_appends_in_order(make_interview):
    interview, _ = make_interview()
    interviews.save_questions(interview.id, [{'type': 'text', 'title': 'One more', 'timeLimit': '90'}])

    data = interviews.get_interview(interview.id)
    assert [q['order_index'] for q in data['questions']] == [1, 2, 3, 4, 5, 6]
    assert data['questions'][-1]['time_limit'] == 90
    assert data['questions'][0]['type'] == 'multiple_choice'
    assert data['questions'][4]['type'] == 'file_upload'


def test_save_questions_is_all_or_nothing(make_interview):
    interview, _ = make_interview()
    with pytest.raises(ValidationError):
        interviews.save_questions(interview.id, [
            {'type': 'text', 'title': 'Valid'},
            {'type': 'essay', 'title': 'Unknown type'},
        ])
    assert Question.query.filter_by(interview_id=interview.id).count() == 5


def test_update_interview_replaces_questions(make_interview):
    interview, _ = make_interview()
    data = interviews.update_interview(interview.id, {
        'title': 'Renamed',
        'status': 'active',
        'questions': [
            {'type': 'multiple-choice', 'title': 'New MC', 'options': ['X', {'option_text': 'Y', 'is_correct': True}]},
        ],
    })

    assert data['title'] == 'Renamed'
    assert data['status'] == 'active'
    assert len(data['questions']) == 1
    assert [o['option_text'] for o in data['questions'][0]['options']] == ['X', 'Y']
    assert QuestionOption.query.count() == 2 + 8  # new question plus seeded demo questions


def test_update_interview_rejects_bad_status(make_interview):
    interview, _ = make_interview()
    with pytest.raises(ValidationError):
        interviews.update_interview(interview.id, {'status': 'archived'})


def test_set_question_options(make_interview):
    _, questions = make_interview()
    mc = questions['multiple_choice']
    assert interviews.set_question_options(mc.id, ['Yes', 'No', 'Maybe']) == 3
    assert [o.option_text for o in db.session.get(Question, mc.id).options] == ['Yes', 'No', 'Maybe']

    with pytest.raises(NotFound):
        interviews.set_question_options('missing', ['x'])


def test_delete_interview_removes_every_dependent_row(make_interview):
    interview = _populate(make_interview)
    interview_id = interview.id
    question_ids = [q.id for q in Question.query.filter_by(interview_id=interview_id)]

    interviews.delete_interview(interview_id)

    assert db.session.get(Interview, interview_id) is None
    assert Question.query.filter_by(interview_id=interview_id).count() == 0
    assert QuestionOption.query.filter(QuestionOption.question_id.in_(question_ids)).count() == 0
    assert InterviewSession.query.filter_by(interview_id=interview_id).count() == 0
    assert Response.query.filter(Response.question_id.in_(question_ids)).count() == 0
    assert TrackingEvent.query.filter(TrackingEvent.question_id.in_(question_ids)).count() == 0
    assert UploadedFile.query.count() == 0


def test_delete_interview_rolls_back_on_failure(make_interview, monkeypatch):
    interview = _populate(make_interview)
    real_delete = interviews._delete_questions

    def _boom(ids):
        real_delete(ids)
        raise SQLAlchemyError('disk full')

    monkeypatch.setattr(interviews, '_delete_questions', _boom)

    with pytest.raises(StorageError):
        interviews.delete_interview(interview.id)

    assert db.session.get(Interview, interview.id) is not None
    assert Question.query.filter_by(interview_id=interview.id).count() == 5
    assert Response.query.count() == 2
    assert UploadedFile.query.count() == 1


def test_delete_unknown_interview(ctx):
    with pytest.raises(NotFound):
        interviews.delete_interview('missing')
