"""Authentication service layer."""

from __future__ import annotations

import logging
from typing import Optional

from flask_jwt_extended import create_access_token

from moodjournal.core.auth.password import hash_password, verify_password
from moodjournal.core.auth.schemas import ChangePasswordRequest, RegisterRequest
from moodjournal.core.errors import InvalidInput, JournalError
from moodjournal.core.users.models import User
from moodjournal.core.users.services import create_user, find_user_by_email
from moodjournal.extensions import db

logger = logging.getLogger(__name__)


class AccountDisabled(JournalError):
    code = "account_disabled"
    status = 403


def authenticate_user(email: str, password: str) -> Optional[User]:
    """Return the user if credentials are valid; disabled accounts raise."""
    user = find_user_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        return None
    if not user.is_active:
        logger.info("Rejected login for disabled user %s", user.id)
        raise AccountDisabled()
    return user


def issue_access_token(user: User) -> str:
    return create_access_token(identity=str(user.id), additional_claims={"roles": user.role_codes})


def register_user(payload: RegisterRequest) -> User:
    return create_user(payload.email, payload.password, full_name=payload.full_name)


def change_password(user: User, payload: ChangePasswordRequest) -> None:
    if not verify_password(payload.current_password, user.password_hash):
        raise InvalidInput("current password is incorrect", code="invalid_current_password")
    user.password_hash = hash_password(payload.new_password)
    db.session.commit()
