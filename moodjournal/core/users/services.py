"""User service layer."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import func

from moodjournal.core.auth.models import ROLE_ADMIN, ROLE_USER, Role
from moodjournal.core.auth.password import hash_password
from moodjournal.core.errors import Conflict, InvalidInput, NotFound
from moodjournal.core.users.models import User
from moodjournal.core.users.schemas import AdminUserUpdateRequest
from moodjournal.extensions import db

logger = logging.getLogger(__name__)


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def get_user_or_404(user_id: int) -> User:
    user = get_user(user_id)
    if not user:
        raise NotFound("user_not_found")
    return user


def find_user_by_email(email: str) -> Optional[User]:
    return User.query.filter(func.lower(User.email) == email.strip().lower()).first()


def ensure_role(name: str) -> Role:
    role = Role.query.filter_by(name=name).first()
    if not role:
        role = Role(name=name, description=f"Auto-created role {name}")
        db.session.add(role)
        db.session.flush()
    return role


def create_user(
    email: str,
    password: str,
    *,
    full_name: Optional[str] = None,
    roles: Iterable[str] = (ROLE_USER,),
    is_active: bool = True,
) -> User:
    normalized = email.strip().lower()
    if find_user_by_email(normalized):
        raise Conflict("email_already_exists", code="email_already_exists")
    user = User(
        email=normalized,
        full_name=full_name,
        password_hash=hash_password(password),
        is_active=is_active,
    )
    db.session.add(user)
    for code in roles:
        role = ensure_role(code)
        if role not in user.roles:
            user.roles.append(role)
    db.session.commit()
    logger.info("Created user %s with roles %s", user.id, user.role_codes)
    return user


def set_primary_role(user: User, role: str) -> None:
    """Grant or revoke admin; every account keeps the base user role."""
    admin_role = ensure_role(ROLE_ADMIN)
    user_role = ensure_role(ROLE_USER)
    if user_role not in user.roles:
        user.roles.append(user_role)
    if role == ROLE_ADMIN and admin_role not in user.roles:
        user.roles.append(admin_role)
    elif role == ROLE_USER and admin_role in user.roles:
        user.roles.remove(admin_role)


def update_user(user: User, payload: AdminUserUpdateRequest) -> User:
    if payload.email and payload.email != user.email:
        existing = find_user_by_email(payload.email)
        if existing and existing.id != user.id:
            raise Conflict("email_already_exists", code="email_already_exists")
        user.email = payload.email
    if payload.full_name is not None:
        user.full_name = payload.full_name
    if payload.password:
        user.password_hash = hash_password(payload.password)
    if payload.is_active is not None:
        user.is_active = payload.is_active
    if payload.role:
        set_primary_role(user, payload.role)
    db.session.commit()
    return user


def delete_user(user: User, *, acting_user_id: int) -> None:
    """Remove an account with its entries and insights; AI usage rows stay unowned."""
    from moodjournal.domains.insights.models import AIUsage, MonthlyInsight
    from moodjournal.domains.journal.models import JournalEntry

    if user.id == acting_user_id:
        raise InvalidInput("an admin cannot delete their own account", code="cannot_delete_self")
    user_id = user.id
    JournalEntry.query.filter_by(user_id=user_id).delete()
    MonthlyInsight.query.filter_by(user_id=user_id).delete()
    AIUsage.query.filter_by(user_id=user_id).update({"user_id": None})
    db.session.delete(user)
    db.session.commit()
    logger.info("User %s deleted by %s", user_id, acting_user_id)
