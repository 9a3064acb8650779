"""
LinguaHub Backend — Credential Helpers
========================================

What:  Password hashing for user accounts and the constant-time admin
       credential check.
How:   passlib CryptContext with pbkdf2_sha256 (salted, iterated). Hash
       strings embed scheme and parameters, so raising the cost later only
       needs a new context; old hashes keep verifying and are flagged by
       needs_update().
"""

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    # Malformed or unknown hash strings count as a mismatch
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False


def credentials_match(
    email: str,
    password: str,
    expected_email: str,
    expected_password: str,
) -> bool:
    """
    Compare a login attempt against configured credentials.

    Both comparisons always run so timing does not reveal which field was
    wrong. Unconfigured credentials never match.
    """
    if not expected_email or not expected_password:
        return False
    email_ok = secrets.compare_digest(email.encode("utf-8"), expected_email.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return email_ok and password_ok
