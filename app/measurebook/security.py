import secrets

from flask import Request, session

_TOKEN_KEY = "csrf_token"


def ensure_csrf_token() -> str:
    """Return the session's CSRF token, minting one on first use."""
    token = session.get(_TOKEN_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[_TOKEN_KEY] = token
    return token


def validate_csrf(req: Request) -> bool:
    submitted = req.headers.get("X-CSRF-Token") or req.form.get(_TOKEN_KEY)
    expected = session.get(_TOKEN_KEY)
    return bool(submitted and expected and secrets.compare_digest(submitted, expected))
