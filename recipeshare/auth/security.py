"""
Credential checks and account audit events.

Sign-in always runs one bcrypt comparison, against a dummy hash when
the email is unknown, so response time does not reveal which emails
have accounts.
"""

from typing import Optional

from recipeshare.extensions import bcrypt
from recipeshare.logging_config import audit_log, sanitize_log_value

DUMMY_HASH: Optional[str] = None


def init_dummy_hash(app) -> None:
    """Hash a throwaway password at the configured cost. Needs an app context."""
    global DUMMY_HASH
    DUMMY_HASH = bcrypt.generate_password_hash('dummy_password_for_timing').decode('utf-8')


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode('utf-8')


def verify_credentials(email: str, password: str):
    """
    Return the user row when email and password match, else None.

    The caller must not reveal why verification failed.
    """
    from recipeshare.auth.models import get_user_by_email

    user = get_user_by_email(email)

    if user is not None:
        if bcrypt.check_password_hash(user['password_hash'], password):
            return user
        return None

    # Unknown email: spend the same bcrypt time, then fail.
    bcrypt.check_password_hash(DUMMY_HASH, password)
    return None


def log_signup(user_id, email: str) -> None:
    audit_log(
        event='signup',
        message=f'Account created for {sanitize_log_value(email)}',
        user_id=user_id,
        email=email,
    )


def log_login_success(user_id, email: str) -> None:
    audit_log(
        event='login_success',
        message=f'Successful login for {sanitize_log_value(email)}',
        user_id=user_id,
        email=email,
    )


def log_login_failed(email: str, reason: str = 'invalid_credentials') -> None:
    audit_log(
        event='login_failed',
        message=f'Failed login for {sanitize_log_value(email)}: {reason}',
        email=email,
        reason=reason,
    )


def log_logout(user_id) -> None:
    audit_log(event='logout', message=f'Logout for user {user_id}', user_id=user_id)


def log_csrf_failure() -> None:
    audit_log(event='csrf_failure', message='CSRF token validation failed')
