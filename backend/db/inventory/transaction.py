import enum
import uuid

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class TransactionType(str, enum.Enum):
    STOCK_IN = "STOCK_IN"
    STOCK_OUT = "STOCK_OUT"

    @classmethod
    def for_delta(cls, delta: int) -> "TransactionType":
        return cls.STOCK_IN if delta >= 0 else cls.STOCK_OUT


class Transaction(Base):
    """Append-only audit row. Zero-amount rows record item create/update."""
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    item_id = Column(
        UUID(as_uuid=True),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Same column type as the users.id primary key.
    user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    transaction_type = Column(Enum(TransactionType, name="transaction_type"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    stock_after = Column(Integer, nullable=False)
    # Plain reference: the batch may be deleted once emptied.
    batch_id = Column(UUID(as_uuid=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    item = relationship("Item", back_populates="transactions")
    user = relationship("User", back_populates="transactions")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "item_id": self.item_id,
            "user_id": self.user_id,
            "transaction_type": self.transaction_type,
            "amount": int(self.amount),
            "stock_after": int(self.stock_after),
            "batch_id": self.batch_id,
            "notes": self.notes,
            "created_at": self.created_at,
        }
