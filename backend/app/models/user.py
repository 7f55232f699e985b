"""
User database model.

Users are owned by the authentication provider; this table only mirrors
the identity so that ownership columns can reference it.
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from backend.app.db.session import Base


class User(Base):
    """
    Authenticated user.

    ``id`` is the opaque identifier issued by the auth provider and carried
    as ``user_id`` in access tokens.
    """
    __tablename__ = "auth_user"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id='{self.id}', email='{self.email}')>"
