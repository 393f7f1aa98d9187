def looks_like_email(email: str) -> bool:
    if not email or '@' not in email or '.' not in email:
        return False
    if len(email) < 6:
        return False
    return True


def require_fields(data: dict, *names):
    """Return the names from ``names`` that are missing or blank in ``data``."""
    missing = []
    for name in names:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing
