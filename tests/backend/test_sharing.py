import pytest

import interview_logic
import sharing
from models import InterviewSession
from utilities.errors import NotFound, ValidationError


def test_share_tokens_are_unique_and_resolvable(make_interview):
    interview, _ = make_interview()

    links = [sharing.issue_share_token(interview.id) for _ in range(25)]
    tokens = {link['token'] for link in links}

    assert len(tokens) == 25
    for link in links[:3]:
        assert link['url'].endswith(f"/interview/access?token={link['token']}")
        assert link['current_uses'] == 0
        assert interview_logic.resolve_token(link['token']).id == link['id']


def test_share_token_echoes_limits(make_interview):
    interview, _ = make_interview()
    link = sharing.issue_share_token(interview.id, max_uses=3, expires_in_days=2)
    assert link['max_uses'] == 3
    assert link['expires_at']


def test_share_token_for_unknown_interview(ctx):
    with pytest.raises(NotFound):
        sharing.issue_share_token('missing')


def test_list_and_delete_share_links(make_interview):
    interview, _ = make_interview()
    link = sharing.issue_share_token(interview.id)

    listed = sharing.list_share_links(interview.id)
    assert listed['interview']['id'] == interview.id
    assert [l['token'] for l in listed['share_links']] == [link['token']]

    sharing.delete_share_link(link['id'])
    assert sharing.list_share_links(interview.id)['share_links'] == []


def test_invites_create_one_session_per_address(make_interview, stub_email):
    interview, _ = make_interview()

    result = sharing.issue_email_invites(
        interview.id,
        ['a@example.com', 'b@example.com'],
        'Your interview',
        'Start here: [INTERVIEW_LINK] (or [INTERVIEW_LINK])',
    )

    assert result.success
    assert result.to_dict()['invites_sent'] == 2
    assert [m['to'] for m in stub_email] == ['a@example.com', 'b@example.com']
    first = result.sent[0]
    assert stub_email[0]['html'] == f"Start here: {first['share_url']} (or {first['share_url']})"
    session = InterviewSession.query.filter_by(access_token=first['token']).one()
    assert session.candidate_email == 'a@example.com'
    assert session.status == 'pending'


def test_invites_stop_at_first_failure(make_interview, monkeypatch):
    interview, _ = make_interview()
    import utilities.email as uemail
    calls = []

    def _send(to_email, subject, html):
        calls.append(to_email)
        if to_email == 'b@example.com':
            return False, 'Brevo error 400'
        return True, None

    monkeypatch.setattr(uemail, 'send_email', _send)

    result = sharing.issue_email_invites(
        interview.id,
        ['a@example.com', 'b@example.com', 'c@example.com'],
        'Subject',
        'Link: [INTERVIEW_LINK]',
    )

    assert calls == ['a@example.com', 'b@example.com']
    assert not result.success
    assert result.error == 'Failed to send email to b@example.com'
    assert result.to_dict() == {
        'invites_sent': 1,
        'invite_details': result.sent,
        'failed_email': 'b@example.com',
    }
    # c@example.com was never reached
    assert InterviewSession.query.filter_by(candidate_email='c@example.com').count() == 0


def test_invites_validate_input(make_interview, stub_email):
    interview, _ = make_interview()
    with pytest.raises(ValidationError):
        sharing.issue_email_invites(interview.id, [], 'S', 'M')
    with pytest.raises(ValidationError):
        sharing.issue_email_invites(interview.id, ['not-an-email'], 'S', 'M')
    with pytest.raises(ValidationError):
        sharing.issue_email_invites(interview.id, ['a@example.com'], '', 'M')
    assert stub_email == []


@pytest.mark.parametrize('days', ['abc', 10 ** 9])
def test_share_token_rejects_bad_expiry(make_interview, days):
    interview, _ = make_interview()
    with pytest.raises(ValidationError):
        sharing.issue_share_token(interview.id, expires_in_days=days)
    assert InterviewSession.query.filter_by(interview_id=interview.id).count() == 0
