import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class ItemBatch(Base):
    __tablename__ = "item_batches"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    item_id = Column(
        UUID(as_uuid=True),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    batch_code = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(DateTime, nullable=True, index=True)
    date_received = Column(DateTime, nullable=False, server_default=func.now())
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    item = relationship("Item", back_populates="batches")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "item_id": self.item_id,
            "batch_code": self.batch_code,
            "quantity": int(self.quantity or 0),
            "expiry_date": self.expiry_date,
            "date_received": self.date_received,
            "created_at": self.created_at,
        }
