import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildmart.database import Base


class CompanyType(Base):
    __tablename__ = "company_types"

    id = Column(String(64), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), unique=True, nullable=False)


class Company(Base):
    """
    Organization that owns items and job postings.
    Items and jobs are removed by the delete handler, not by the database.
    """
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
    type_id = Column(String(64), ForeignKey("company_types.id"), nullable=True)
    address = Column(Text, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    logo_url = Column(String(500), nullable=True)
    email = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    location = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    website = Column(String(300), nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # Denormalized display name of the company type
    company_type = Column(String(100), nullable=True)

    type = relationship("CompanyType")
