import uuid
from sqlalchemy import Column, String, Text

from buildmart.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=True)
    email = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(200), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(200), nullable=True)
    profile_picture_url = Column(String(500), nullable=True)
    role = Column(String(50), nullable=True)  # "admin" or NULL
