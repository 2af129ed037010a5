"""ORM models for application users and their roles (auth and RBAC)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, func
from sqlalchemy.orm import relationship

from app.models.base import Base

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """Named capability label (canonical form: upper case, no ROLE_ prefix)."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, unique=True, index=True)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    username is unique; the database constraint is what serializes concurrent
    registrations of the same name.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    roles = relationship(Role, secondary=user_roles, lazy="selectin", order_by=Role.id)

    @property
    def role_names(self) -> tuple[str, ...]:
        return tuple(role.name for role in self.roles)
