import uuid
from sqlalchemy import Column, String, Text, Float, DateTime, JSON, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildmart.database import Base

UNITS = (
    "m²", "m³", "kg", "ton", "liter", "gallon", "bag", "quintal",
    "piece", "roll", "sheet", "bundle", "foot (ft)", "inch (in)", "lm", "Per Point",
    "Per hour", "Per day", "Per week", "Per month", "Per shift", "Per project (lumpsum)",
)


class Item(Base):
    __tablename__ = "items"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    category_id = Column(String(64), ForeignKey("item_category.id"), nullable=True)
    price = Column(Float, nullable=True)
    unit = Column(Enum(*UNITS, name="unit"), nullable=True)
    description = Column(Text, nullable=True)
    image_urls = Column(JSON, nullable=True)  # ordered list of URLs
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    company = relationship("Company")
    category = relationship("ItemCategory")
