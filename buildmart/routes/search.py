import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildmart.database import get_db
from buildmart.services import search_service
from buildmart.services.storage_service import BlobStorage, get_storage

router = APIRouter(tags=["search"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@router.get("/search")
def search(
    query: str = Query(""),
    types: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(search_service.DEFAULT_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
):
    """
    Search products (paginated), companies, jobs, tenders and articles.
    The response holds one key per requested type.
    """
    try:
        return search_service.search(db, storage, query=query, types=types, page=page, limit=limit)
    except Exception as e:
        logger.error(f"Error performing search: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to fetch search results"},
        )
