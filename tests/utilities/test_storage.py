import types

import pytest
import requests

import utilities.storage as storage
from utilities.errors import UploadError


class _Resp:
    """
    Minimal response stub used to simulate requests.Response in tests.
    - raise_for_status() raises HTTPError for non-2xx statuses.
    - json() returns the provided payload, or raises ValueError when it is None.
    """
    def __init__(self, status_code=200, json_payload=None, text=""):
        self.status_code = status_code
        self._json = json_payload
        self.text = text

    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            http_err = requests.exceptions.HTTPError()
            http_err.response = types.SimpleNamespace(status_code=self.status_code, text=self.text)
            raise http_err

    def json(self):
        if self._json is None:
            raise ValueError('no json')
        return self._json


@pytest.fixture(autouse=True)
def blob_token(monkeypatch):
    monkeypatch.setattr(storage, 'BLOB_READ_WRITE_TOKEN', 'rw-token')
    monkeypatch.setattr(storage, 'BLOB_API_URL', 'https://blob.test/')


def test_generate_file_path(monkeypatch):
    monkeypatch.setattr(storage.time, 'time', lambda: 1700000000.5)
    assert storage.generate_file_path('s1', 'q1', 'cv.final.pdf', prefix='file') == \
        'interviews/s1/q1/file-1700000000500.pdf'
    assert storage.generate_file_path('s1', 'q1', 'noext').endswith('/1700000000500.bin')


def test_upload_returns_public_url(monkeypatch):
    captured = {}

    def _put(url, headers=None, data=None, timeout=0):
        captured.update(url=url, headers=headers, data=data)
        return _Resp(200, {'url': 'https://public.blob/x.pdf', 'pathname': 'x.pdf'})

    monkeypatch.setattr(storage.requests, 'put', _put)

    result = storage.upload(b'abc', 'interviews/s/q/x.pdf', 'application/pdf')

    assert result == {'url': 'https://public.blob/x.pdf', 'pathname': 'x.pdf', 'size': 3}
    assert captured['url'] == 'https://blob.test/interviews/s/q/x.pdf'
    assert captured['headers']['authorization'] == 'Bearer rw-token'
    assert captured['headers']['x-content-type'] == 'application/pdf'


def test_upload_file_keeps_original_name(monkeypatch):
    monkeypatch.setattr(storage.requests, 'put', lambda url, **k: _Resp(200, {'url': url}))
    result = storage.upload_file(b'data', 's1', 'q1', 'resume.docx')
    assert result['original_name'] == 'resume.docx'
    assert result['url'].endswith('.docx')


@pytest.mark.parametrize('resp', [
    _Resp(500, {'error': 'boom'}),
    _Resp(200, None),
    _Resp(200, {'pathname': 'no-url'}),
])
def test_upload_failures_raise(monkeypatch, resp):
    monkeypatch.setattr(storage.requests, 'put', lambda *a, **k: resp)
    with pytest.raises(UploadError):
        storage.upload_video(b'webm', 's1', 'q1')


def test_upload_without_token(monkeypatch):
    monkeypatch.setattr(storage, 'BLOB_READ_WRITE_TOKEN', None)
    with pytest.raises(UploadError):
        storage.upload(b'x', 'p')
