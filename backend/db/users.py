import enum
from typing import Optional

from fastapi_users.db import SQLAlchemyBaseUserTableUUID
from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .database import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"


class User(SQLAlchemyBaseUserTableUUID, Base):
    __tablename__ = "users"

    # Null until the user sets a password on first login.
    hashed_password: Mapped[Optional[str]] = mapped_column(String(length=1024), nullable=True)

    full_name = Column(String, nullable=True)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.STAFF)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    transactions = relationship("Transaction", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def to_schema(self):
        """Convert User model to schema dictionary format"""
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
        }
