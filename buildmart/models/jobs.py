import uuid
from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildmart.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False, index=True)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=False)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    location = Column(String(200), nullable=True)
    salary = Column(String(100), nullable=True)
    type = Column(String(50), nullable=True)  # Full-time / Part-time / Contract / Temporary / Internship
    position = Column(String(100), nullable=True)
    experience = Column(String(100), nullable=True)
    required_skills = Column(JSON, nullable=True)
    qualifications = Column(Text, nullable=True)
    how_to_apply = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)
    application_link = Column(String(500), nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    company = relationship("Company")
