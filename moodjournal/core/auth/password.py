"""Password policy and bcrypt hashing."""

from __future__ import annotations

import re

from moodjournal.extensions import bcrypt

# At least 8 characters with one letter and one digit.
PASSWORD_POLICY = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{8,}$")
PASSWORD_POLICY_MESSAGE = "password must be at least 8 chars and include letters and numbers"


def check_password_policy(plain_password: str) -> str:
    if not PASSWORD_POLICY.match(plain_password or ""):
        raise ValueError(PASSWORD_POLICY_MESSAGE)
    return plain_password


def hash_password(plain_password: str) -> str:
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return bcrypt.check_password_hash(hashed_password, plain_password)
