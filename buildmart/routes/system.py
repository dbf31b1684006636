import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from buildmart.core.errors import server_error
from buildmart.database import get_db
from buildmart.services.seed import seed_reference_data

router = APIRouter(tags=["system"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@router.get("/health", response_class=PlainTextResponse)
def health():
    return "OK"


@router.post("/seed")
def seed(db: Session = Depends(get_db)):
    """Load categories, company types, cities and units into an empty database"""
    try:
        if seed_reference_data(db):
            return {"message": "Database seeded successfully"}
        return {"message": "Already seeded"}
    except Exception as e:
        db.rollback()
        logger.error(f"Error seeding database: {str(e)}", exc_info=True)
        raise server_error(e, "seeding the database")
