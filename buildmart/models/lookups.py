import uuid
from sqlalchemy import Column, Integer, String, Text, ForeignKey

from buildmart.database import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(String(64), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    city = Column(String(100), nullable=False)
    region = Column(String(100), nullable=True)


class Unit(Base):
    __tablename__ = "units"

    id = Column(String(64), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), unique=True, nullable=False)


class Rfq(Base):
    """Request for quotation"""
    __tablename__ = "rfq"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    item_name = Column(String(200), nullable=False)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    quantity = Column(Integer, nullable=True)
    unit = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
