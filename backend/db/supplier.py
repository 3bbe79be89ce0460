import uuid
from sqlalchemy import Boolean, Column, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .database import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True, index=True)
    business_name = Column(String, nullable=True)
    contact_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # 'DISTRIBUTOR' | 'RETAILER' | 'ONLINE' | 'WHOLESALE' | 'PRODUCER' | 'OTHER'
    supplier_type = Column(String, nullable=True)
    # 'QUANTITY' | 'ITEMS' | 'PRICE'
    min_order_type = Column(String, nullable=True)
    min_order_value = Column(Numeric, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    items = relationship("Item", back_populates="supplier")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "business_name": self.business_name,
            "contact_name": self.contact_name,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "address": self.address,
            "notes": self.notes,
            "supplier_type": self.supplier_type,
            "min_order_type": self.min_order_type,
            "min_order_value": float(self.min_order_value) if self.min_order_value is not None else None,
            "is_active": bool(self.is_active),
        }
