import pytest

from utilities.constants import normalize_question_type
from utilities.formatting import format_csv_number, format_duration, format_file_size, format_number
from utilities.tokens import generate_access_token
from utilities.validators import looks_like_email, require_fields


@pytest.mark.parametrize('seconds,expected', [
    (0, '0m 0.00s'),
    (75.5, '1m 15.50s'),
    (3725, '1h 2m 5.00s'),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_numbers():
    assert format_number(33.33333) == 33.33
    assert format_number(None) == 0
    assert format_file_size(0) == '0 Bytes'
    assert format_file_size(1536) == '1.5 KB'
    assert format_csv_number(90.0) == '90'
    assert format_csv_number(12.25) == '12.25'


def test_access_tokens():
    tokens = {generate_access_token() for _ in range(200)}
    assert len(tokens) == 200
    assert all(len(t) == 16 and t.isalnum() and t.upper() == t for t in tokens)


def test_question_type_aliases():
    assert normalize_question_type('multiple-choice') == 'multiple_choice'
    assert normalize_question_type('file-upload') == 'file_upload'
    assert normalize_question_type('text') == 'text'


def test_validators():
    assert looks_like_email('a@example.com')
    assert not looks_like_email('nope')
    assert require_fields({'a': 'x', 'b': '  ', 'c': None}, 'a', 'b', 'c', 'd') == ['b', 'c', 'd']
