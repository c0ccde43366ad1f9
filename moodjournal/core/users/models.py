"""Journal account model."""

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column, relationship

from moodjournal.core.auth.models import ROLE_ADMIN, TimestampMixin
from moodjournal.extensions import db


class User(db.Model, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(db.String(255))
    is_active: Mapped[bool] = mapped_column(default=True)

    roles = relationship("Role", secondary="user_role", backref="users", lazy="joined")

    @property
    def role_codes(self) -> list[str]:
        return sorted(role.name for role in self.roles) if self.roles else []

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.role_codes
