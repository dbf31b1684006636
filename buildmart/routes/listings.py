import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildmart.core.dependencies import get_optional_user
from buildmart.core.errors import server_error
from buildmart.database import get_db
from buildmart.models.categories import ItemCategory
from buildmart.models.user import User
from buildmart.services.documents import (
    ARTICLES_FOLDER,
    TENDERS_FOLDER,
    decode_article,
    decode_tender,
    load_documents,
)
from buildmart.services.listing import (
    DEFAULT_PRICE_RANGE,
    PROFILES,
    FilterState,
    SetCategories,
    SetLocation,
    SetOwnerOnly,
    SetPage,
    SetPriceRange,
    SetSearch,
    SetSort,
    filter_sort_paginate,
    reduce_filters,
)
from buildmart.services.records import load_companies, load_jobs, load_products
from buildmart.services.storage_service import BlobStorage, get_storage

router = APIRouter(tags=["listings"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def expand_product_categories(db: Session, names: List[str]) -> List[str]:
    """A selected parent category also selects its subcategories"""
    expanded = list(names)
    parents = db.query(ItemCategory).filter(ItemCategory.category.in_(names)).all()
    for parent in parents:
        for child in parent.subcategories:
            if child.category not in expanded:
                expanded.append(child.category)
    return expanded


def load_records(kind: str, db: Session, storage: Optional[BlobStorage]) -> List[dict]:
    if kind == "products":
        return load_products(db)
    if kind == "companies":
        return load_companies(db)
    if kind == "jobs":
        return load_jobs(db)
    if storage is None:
        return []
    if kind == "tenders":
        return [t.model_dump(by_alias=True) for t in load_documents(storage, TENDERS_FOLDER, decode_tender)]
    return [a.model_dump(by_alias=True) for a in load_documents(storage, ARTICLES_FOLDER, decode_article)]


@router.get("/listings/{kind}")
def browse(
    kind: str,
    search: Optional[str] = Query(None),
    categories: Optional[str] = Query(None, description="Comma separated category labels"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    mine: bool = Query(False),
    location: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
    user: Optional[User] = Depends(get_optional_user),
):
    """
    Browse one entity type with search, filters, sorting and pagination.
    Tenders and articles also return up to three featured records.
    """
    profile = PROFILES.get(kind)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "NotFoundError",
                "message": f"Unknown listing '{kind}'. Expected one of: {', '.join(PROFILES)}",
                "type": "not_found"
            }
        )
    if mine and user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Authentication required"},
        )

    try:
        state = FilterState()
        if search is not None:
            state = reduce_filters(state, SetSearch(search))
        if categories:
            names = [c for c in categories.split(",") if c.strip()]
            if kind == "products":
                names = expand_product_categories(db, [n.strip() for n in names])
            state = reduce_filters(state, SetCategories(tuple(names)))
        if min_price is not None or max_price is not None:
            state = reduce_filters(state, SetPriceRange(
                min_price if min_price is not None else DEFAULT_PRICE_RANGE[0],
                max_price if max_price is not None else DEFAULT_PRICE_RANGE[1],
            ))
        if mine:
            state = reduce_filters(state, SetOwnerOnly(True, user.id))
        if location is not None:
            state = reduce_filters(state, SetLocation(location))
        if sort:
            state = reduce_filters(state, SetSort(sort))
        state = reduce_filters(state, SetPage(page))

        listing = filter_sort_paginate(load_records(kind, db, storage), state, profile)
    except Exception as e:
        logger.error(f"Error building {kind} listing: {str(e)}", exc_info=True)
        raise server_error(e, f"fetching {kind}")

    logger.info(f"Listing {kind}: {listing.page.total} matches, page {listing.page.page}/{listing.page.pages}")
    return {
        "items": listing.page.items,
        "featured": listing.featured,
        "total": listing.page.total,
        "page": listing.page.page,
        "pages": listing.page.pages,
        "pageSize": listing.page.page_size,
        "filters": asdict(state),
    }
