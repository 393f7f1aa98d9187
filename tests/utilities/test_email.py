import requests

import utilities.email as email


class _Resp:
    """Minimal stand-in for requests.Response."""
    def __init__(self, status_code=201, text=""):
        self.status_code = status_code
        self.text = text


def test_send_email_success(monkeypatch):
    captured = {}

    def _post(url, headers=None, json=None, timeout=0):
        captured.update(url=url, headers=headers, json=json)
        return _Resp(201)

    monkeypatch.setattr(email, 'BREVO_KEY', 'key-123')
    monkeypatch.setattr(email.requests, 'post', _post)

    ok, err = email.send_email('cand@example.com', 'Invite', '<p>Hi</p>')

    assert (ok, err) == (True, None)
    assert captured['headers']['api-key'] == 'key-123'
    assert captured['json']['to'] == [{'email': 'cand@example.com'}]
    assert captured['json']['htmlContent'] == '<p>Hi</p>'


def test_send_email_reports_api_error(monkeypatch):
    monkeypatch.setattr(email, 'BREVO_KEY', 'key-123')
    monkeypatch.setattr(email.requests, 'post', lambda *a, **k: _Resp(400, 'invalid sender'))

    ok, err = email.send_email('cand@example.com', 'Invite', 'x')

    assert ok is False
    assert 'Brevo error 400' in err


def test_send_email_transport_failure(monkeypatch):
    def _post(*a, **k):
        raise requests.exceptions.ConnectionError('refused')

    monkeypatch.setattr(email, 'BREVO_KEY', 'key-123')
    monkeypatch.setattr(email.requests, 'post', _post)

    ok, err = email.send_email('cand@example.com', 'Invite', 'x')
    assert ok is False
    assert 'refused' in err


def test_send_email_without_key(monkeypatch):
    monkeypatch.setattr(email, 'BREVO_KEY', None)
    assert email.send_email('a@example.com', 's', 'b') == (False, 'BREVO_KEY not configured on server')
