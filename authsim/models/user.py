"""User model definitions."""

from enum import Enum

from sqlalchemy import Column, Integer, String
from authsim.database import Base


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base):
    """Represents a registered account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)  # toy base64 encoding, see auth.passwords
    role = Column(String, nullable=False, default=Role.USER.value)
    created_at = Column(String, nullable=False)  # YYYY-MM-DD
