import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_items_current_stock_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    brand = Column(String, nullable=True)
    base_name = Column(String, nullable=False)
    size = Column(String, nullable=True)
    qty_weight = Column(String, nullable=True)
    # Derived from brand/base_name/size/qty_weight, see core.converters.display_name
    display_name = Column(String, nullable=False, index=True)

    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    has_expiry = Column(Boolean, nullable=False, default=False)
    is_critical = Column(Boolean, nullable=False, default=False, index=True)

    category_id = Column(UUID(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    supplier_id = Column(UUID(as_uuid=True), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True, index=True)
    storage_location_id = Column(
        UUID(as_uuid=True),
        ForeignKey("storage_locations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    cost = Column(Numeric(12, 2), nullable=True)
    reorder_qty = Column(Integer, nullable=False, default=10)
    current_stock = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="items")
    supplier = relationship("Supplier", back_populates="items")
    storage_location = relationship("StorageLocation", back_populates="items")

    batches = relationship(
        "ItemBatch",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="ItemBatch.expiry_date",
    )
    transactions = relationship("Transaction", back_populates="item", cascade="all, delete-orphan")

    @property
    def is_low_stock(self) -> bool:
        return int(self.current_stock or 0) <= int(self.reorder_qty or 0)
