import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from buildmart.core.dependencies import ensure_owner_or_admin, get_current_user
from buildmart.core.errors import (
    bad_request,
    not_found,
    server_error,
    storage_unavailable,
    upload_error,
    validation_error,
)
from buildmart.database import get_db
from buildmart.models.categories import ItemCategory
from buildmart.models.company import Company
from buildmart.models.items import Item
from buildmart.models.user import User
from buildmart.schemas.products import MAX_PRODUCT_IMAGES, ProductBase, ProductCreate, ProductListItem, ProductUpdate
from buildmart.services.records import load_products, product_record
from buildmart.services.storage_service import BlobStorage, get_storage

router = APIRouter(tags=["products"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

UPLOAD_FOLDER = "uploads"


def _check_image_count(count: int):
    if count < 1:
        raise bad_request("At least one product image is required", field="productImages")
    if count > MAX_PRODUCT_IMAGES:
        raise bad_request(
            f"Maximum {MAX_PRODUCT_IMAGES} images allowed. You provided {count} images.",
            field="productImages",
        )


def _parse_existing_urls(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    try:
        urls = json.loads(raw)
    except json.JSONDecodeError:
        raise bad_request("existingImageUrls must be a JSON array of URLs", field="existingImageUrls")
    if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
        raise bad_request("existingImageUrls must be a JSON array of URLs", field="existingImageUrls")
    return urls


def _check_references(db: Session, company_id: Optional[str], category_id: Optional[str], current_user: User):
    if company_id is not None:
        company = db.query(Company).filter(Company.id == company_id).first()
        if not company:
            raise not_found("Company", company_id)
        ensure_owner_or_admin(company.user_id, current_user, "companies", "add products to")
    if category_id is not None:
        if not db.query(ItemCategory).filter(ItemCategory.id == category_id).first():
            raise not_found("Category", category_id)


async def _upload(storage: Optional[BlobStorage], files: List[UploadFile]) -> List[str]:
    if not files:
        return []
    if storage is None:
        raise storage_unavailable()
    try:
        return await storage.upload_images(files, UPLOAD_FOLDER, max_images=MAX_PRODUCT_IMAGES)
    except ValueError as ve:
        raise upload_error(ve, "productImages")


@router.get("", response_model=List[ProductListItem])
def list_products(userId: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """All products and services, newest first, optionally only one user's"""
    try:
        return load_products(db, user_id=userId)
    except Exception as e:
        logger.error(f"Error fetching products: {str(e)}", exc_info=True)
        raise server_error(e, "fetching products")


@router.get("/{product_id}", response_model=ProductListItem)
def get_product(product_id: str, db: Session = Depends(get_db)):
    item = db.query(Item).filter(Item.id == product_id).first()
    if not item:
        raise not_found("Product", product_id)
    return product_record(item)


@router.post("", response_model=ProductListItem, status_code=status.HTTP_201_CREATED)
async def create_product(
    name: Optional[str] = Form(None),
    companyId: Optional[str] = Form(None),
    categoryId: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    unit: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    productImages: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """
    Create a product or service from a multipart form with 1-3 images.
    Images are stored in upload order.
    """
    try:
        try:
            fields = ProductBase(
                name=name, company_id=companyId, category_id=categoryId,
                price=price, unit=unit, description=description,
            )
        except ValidationError as e:
            raise validation_error(e)

        files = productImages or []
        _check_image_count(len(files))
        _check_references(db, fields.company_id, fields.category_id, current_user)

        logger.info(f"User {current_user.username} is creating product '{fields.name}' with {len(files)} images")
        image_urls = await _upload(storage, files)
        product = ProductCreate(**fields.model_dump(), image_urls=image_urls)

        item = Item(**product.model_dump(), user_id=current_user.id)
        db.add(item)
        db.commit()
        db.refresh(item)

        logger.info(f"Product created successfully: {item.name} (ID: {item.id})")
        return product_record(item)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating product: {str(e)}", exc_info=True)
        raise server_error(e, "creating the product")


@router.put("/{product_id}", response_model=ProductListItem)
async def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    companyId: Optional[str] = Form(None),
    categoryId: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    unit: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    existingImageUrls: Optional[str] = Form(None),
    productImages: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """
    Update a product. The stored image list becomes the retained URLs
    (existingImageUrls, in their given order) followed by the new uploads.
    """
    try:
        item = db.query(Item).filter(Item.id == product_id).first()
        if not item:
            raise not_found("Product", product_id)
        ensure_owner_or_admin(item.user_id, current_user, "products", "edit")

        submitted = {
            "name": name, "company_id": companyId, "category_id": categoryId,
            "price": price, "unit": unit, "description": description,
        }
        try:
            changes = ProductUpdate(**{k: v for k, v in submitted.items() if v is not None})
        except ValidationError as e:
            raise validation_error(e)

        retained = _parse_existing_urls(existingImageUrls)
        if retained is None:
            retained = list(item.image_urls or [])
        files = productImages or []
        _check_image_count(len(retained) + len(files))
        _check_references(db, changes.company_id, changes.category_id, current_user)

        logger.info(f"User {current_user.username} is updating product {product_id}")
        new_urls = await _upload(storage, files)

        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(item, field, value)
        item.image_urls = retained + new_urls

        db.commit()
        db.refresh(item)

        logger.info(f"Product updated successfully: {item.name} (ID: {item.id})")
        return product_record(item)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating product {product_id}: {str(e)}", exc_info=True)
        raise server_error(e, "updating the product")


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        item = db.query(Item).filter(Item.id == product_id).first()
        if not item:
            raise not_found("Product", product_id)
        ensure_owner_or_admin(item.user_id, current_user, "products", "delete")

        logger.info(f"User {current_user.username} is deleting product {product_id}")
        db.delete(item)
        db.commit()
        return {"message": "Product deleted successfully", "id": product_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting product {product_id}: {str(e)}", exc_info=True)
        raise server_error(e, "deleting the product")
