import secrets
import string

from .constants import ACCESS_TOKEN_LENGTH

_ALPHABET = string.ascii_uppercase + string.digits


def generate_access_token(length: int = ACCESS_TOKEN_LENGTH) -> str:
    """Random uppercase alphanumeric token (about 82 bits at the default length)."""
    return ''.join(secrets.choice(_ALPHABET) for _ in range(length))
