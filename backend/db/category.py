import uuid
from sqlalchemy import Boolean, Column, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True, index=True)
    color = Column(String(7), nullable=True)  # '#RRGGBB'
    is_active = Column(Boolean, nullable=False, default=True)

    items = relationship("Item", back_populates="category")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "is_active": bool(self.is_active),
        }
