"""Seed the base roles and an admin account.

Usage:
    python -m moodjournal.scripts.seed_admin --email admin@example.com --password secret123
"""

from __future__ import annotations

import logging

import click

from moodjournal import create_app
from moodjournal.core.auth.models import ROLE_ADMIN, ROLE_USER
from moodjournal.core.auth.password import hash_password
from moodjournal.core.users.models import User
from moodjournal.core.users.services import ensure_role, find_user_by_email
from moodjournal.extensions import db


def seed_roles() -> None:
    ensure_role(ROLE_USER)
    ensure_role(ROLE_ADMIN)
    db.session.commit()


def seed_admin_user(email: str, password: str, full_name: str | None = None) -> User:
    """Create the admin, or promote and re-activate an existing account."""
    user = find_user_by_email(email)
    if not user:
        user = User(
            email=email.strip().lower(),
            full_name=full_name or "Admin",
            password_hash=hash_password(password),
        )
        db.session.add(user)
        db.session.flush()
    user.is_active = True
    for code in (ROLE_USER, ROLE_ADMIN):
        role = ensure_role(code)
        if role not in user.roles:
            user.roles.append(role)
    db.session.commit()
    return user


@click.command()
@click.option("--email", required=True, help="Admin email")
@click.option("--password", required=True, help="Admin password")
@click.option("--full-name", default="Admin", help="Admin display name")
def main(email: str, password: str, full_name: str) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    with app.app_context():
        seed_roles()
        user = seed_admin_user(email, password, full_name)
        click.echo(f"Seeded admin user {user.email} with roles {user.role_codes}")


if __name__ == "__main__":
    main()
