from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from buildmart.core.config import DATABASE_URL

SQLALCHEMY_DATABASE_URL = DATABASE_URL

# SQLite (local runs, tests) needs the same connection shared across threads
connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

# Create database engine
engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True, echo=False, connect_args=connect_args)

# Create declarative base
Base = declarative_base()


# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency for database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
