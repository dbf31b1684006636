"""
Database initialization script
Creates all tables and loads the reference data (categories, company types, cities, units)
"""
import logging

import buildmart.models  # noqa: F401
from buildmart.database import Base, SessionLocal, engine
from buildmart.services.seed import seed_reference_data

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_db():
    """Initialize database with all tables and reference data"""
    try:
        logger.info("Creating all database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("✓ Database tables created successfully!")

        db = SessionLocal()
        try:
            if seed_reference_data(db):
                logger.info("✓ Reference data seeded")
            else:
                logger.info("✓ Reference data already present")
        finally:
            db.close()

        logger.info("\nDatabase initialization complete!")
        logger.info("You can now start the FastAPI server.")

    except Exception as e:
        logger.error(f"✗ Error initializing database: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
