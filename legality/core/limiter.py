"""SlowAPI limiter shared by main (app.state.limiter) and the route modules.

Per-IP limits come from the decorators below. Password sign-in and sign-up
are additionally limited per email address so one account cannot be
brute-forced from many addresses.
"""

import time
from threading import Lock

from fastapi import HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

LOGIN_LIMIT = "10/minute"
SIGNUP_LIMIT = "5/minute"
WRITE_ENDPOINT_LIMIT = "120/minute"
AUTH_PER_EMAIL_LIMIT = 20  # attempts per window per email
AUTH_PER_EMAIL_WINDOW_SEC = 60

limit_auth = limiter.limit(LOGIN_LIMIT)
limit_signup = limiter.limit(SIGNUP_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)

_auth_per_email: dict[str, list[float]] = {}
_auth_per_email_lock = Lock()


def check_auth_rate_per_email(email: str) -> None:
    """Raise 429 if this email saw too many sign-in or sign-up attempts in the window."""
    if not email:
        return
    now = time.monotonic()
    cutoff = now - AUTH_PER_EMAIL_WINDOW_SEC
    key = email.strip().lower()
    with _auth_per_email_lock:
        _evict_expired(cutoff)
        attempts = _auth_per_email.setdefault(key, [])
        if len(attempts) >= AUTH_PER_EMAIL_LIMIT:
            raise HTTPException(
                status_code=429,
                detail="Demasiados intentos para esta cuenta; intenta más tarde",
            )
        attempts.append(now)


def _evict_expired(cutoff: float) -> None:
    """Prune attempts older than cutoff; emails left with none are forgotten."""
    for key in list(_auth_per_email):
        recent = [t for t in _auth_per_email[key] if t > cutoff]
        if recent:
            _auth_per_email[key] = recent
        else:
            del _auth_per_email[key]


def tracked_emails() -> int:
    """Number of emails with attempts inside the current window."""
    with _auth_per_email_lock:
        return len(_auth_per_email)


def reset_auth_attempts() -> None:
    """Forget every per-email attempt (used between tests)."""
    with _auth_per_email_lock:
        _auth_per_email.clear()
