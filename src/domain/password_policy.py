"""
Password policy - business-level strength rules.

Applied by every workflow that sets a password, independently of any
structural checks done on the request body.
"""

import re

from .exceptions import DomainError

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
MIN_LENGTH = 8
# bcrypt only consumes the first 72 bytes
MAX_BYTES = 72

_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


def is_password_secure(password: str) -> bool:
    return (
        len(password) >= MIN_LENGTH
        and len(password.encode()) <= MAX_BYTES
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[a-z]", password) is not None
        and re.search(r"\d", password) is not None
        and _SPECIAL_RE.search(password) is not None
    )


def check_password(password: str, field: str = "password") -> None:
    """
    Raise a validation error unless the password meets the policy.

    Raises:
        DomainError(VALIDATION): With the offending field name
    """
    if not is_password_secure(password):
        raise DomainError.validation(field, "Password does not meet security requirements")
