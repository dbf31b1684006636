import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from buildmart.core.dependencies import get_current_user
from buildmart.core.errors import not_found, server_error
from buildmart.database import get_db
from buildmart.models.categories import ItemCategory
from buildmart.models.company import CompanyType
from buildmart.models.lookups import Location, Unit
from buildmart.models.user import User
from buildmart.schemas.categories import (
    CategoryCreate,
    CategoryResponse,
    CategoryTree,
    CityResponse,
    CompanyTypeResponse,
    UnitResponse,
)

router = APIRouter(tags=["lookups"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@router.get("/categories", response_model=List[CategoryTree])
def get_categories(db: Session = Depends(get_db)):
    """Top-level product and service categories with their direct subcategories"""
    try:
        top_level = (
            db.query(ItemCategory)
            .filter(ItemCategory.parent_id.is_(None), ItemCategory.type.in_(("product", "service")))
            .order_by(ItemCategory.type, ItemCategory.category)
            .all()
        )
        return [
            CategoryTree(
                id=c.id,
                category=c.category,
                type=c.type,
                parent_id=None,
                subcategories=[
                    CategoryResponse.model_validate(s)
                    for s in sorted(c.subcategories, key=lambda s: s.category)
                ],
            )
            for c in top_level
        ]
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}", exc_info=True)
        raise server_error(e, "fetching categories")


@router.get("/tender-categories", response_model=List[CategoryResponse])
def get_tender_categories(db: Session = Depends(get_db)):
    return (
        db.query(ItemCategory)
        .filter(ItemCategory.type == "tender")
        .order_by(ItemCategory.category)
        .all()
    )


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        if category_data.parent_id:
            parent = db.query(ItemCategory).filter(ItemCategory.id == category_data.parent_id).first()
            if not parent:
                raise not_found("Category", category_data.parent_id)
            if parent.type != category_data.type:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail={
                        "error": "ValidationError",
                        "message": f"A {category_data.type} category cannot be nested under a {parent.type} category",
                        "type": "value_error"
                    }
                )

        logger.info(f"User {current_user.username} is creating category '{category_data.category}'")
        category = ItemCategory(**category_data.model_dump())
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating category: {str(e)}", exc_info=True)
        raise server_error(e, "creating the category")


@router.get("/company-types", response_model=List[CompanyTypeResponse])
def get_company_types(db: Session = Depends(get_db)):
    return db.query(CompanyType).order_by(CompanyType.name).all()


@router.get("/cities", response_model=List[CityResponse])
def get_cities(db: Session = Depends(get_db)):
    return db.query(Location).order_by(Location.city).all()


@router.get("/units", response_model=List[UnitResponse])
def get_units(db: Session = Depends(get_db)):
    return db.query(Unit).order_by(Unit.name).all()
