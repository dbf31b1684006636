import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from buildmart.core.dependencies import ensure_owner_or_admin, get_current_user
from buildmart.core.errors import not_found, server_error, storage_unavailable, upload_error, validation_error
from buildmart.database import get_db
from buildmart.models.company import Company, CompanyType
from buildmart.models.items import Item
from buildmart.models.jobs import Job
from buildmart.models.lookups import Rfq
from buildmart.models.user import User
from buildmart.schemas.companies import CompanyCreate, CompanyResponse, CompanyUpdate
from buildmart.schemas.products import ProductListItem
from buildmart.services.records import load_companies, load_products
from buildmart.services.storage_service import BlobStorage, get_storage

router = APIRouter(tags=["companies"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

LOGO_FOLDER = "uploads"


async def _upload_logo(storage: Optional[BlobStorage], logo: Optional[UploadFile]) -> Optional[str]:
    if logo is None or not logo.filename:
        return None
    if storage is None:
        raise storage_unavailable()
    try:
        return await storage.upload_image(logo, LOGO_FOLDER)
    except ValueError as ve:
        raise upload_error(ve, "companyLogo")


def _type_name(db: Session, type_id: Optional[str]) -> Optional[str]:
    if not type_id:
        return None
    company_type = db.query(CompanyType).filter(CompanyType.id == type_id).first()
    if not company_type:
        raise not_found("Company type", type_id)
    return company_type.name


def _get_company(db: Session, company_id: str) -> Company:
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise not_found("Company", company_id)
    return company


@router.get("", response_model=List[CompanyResponse])
def list_companies(userId: Optional[str] = Query(None), db: Session = Depends(get_db)):
    try:
        return load_companies(db, user_id=userId)
    except Exception as e:
        logger.error(f"Error fetching companies: {str(e)}", exc_info=True)
        raise server_error(e, "fetching companies")


@router.get("/{company_id}", response_model=CompanyResponse)
def get_company(company_id: str, db: Session = Depends(get_db)):
    return _get_company(db, company_id)


@router.get("/{company_id}/products", response_model=List[ProductListItem])
def get_company_products(company_id: str, db: Session = Depends(get_db)):
    _get_company(db, company_id)
    return load_products(db, company_id=company_id)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    name: Optional[str] = Form(None),
    typeId: Optional[str] = Form(None),
    companyType: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    companyLogo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Create a company owned by the session user; the logo is optional"""
    try:
        try:
            data = CompanyCreate(
                name=name, type_id=typeId, company_type=companyType, address=address, email=email,
                phone=phone, location=location, description=description, website=website,
            )
        except ValidationError as e:
            raise validation_error(e)

        if data.type_id and not data.company_type:
            data.company_type = _type_name(db, data.type_id)

        logger.info(f"User {current_user.username} is creating company '{data.name}'")
        data.logo_url = await _upload_logo(storage, companyLogo)

        company = Company(**data.model_dump(), user_id=current_user.id)
        db.add(company)
        db.commit()
        db.refresh(company)

        logger.info(f"Company created successfully: {company.name} (ID: {company.id})")
        return company

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating company: {str(e)}", exc_info=True)
        raise server_error(e, "creating the company")


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    name: Optional[str] = Form(None),
    typeId: Optional[str] = Form(None),
    companyType: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    companyLogo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    try:
        company = _get_company(db, company_id)
        ensure_owner_or_admin(company.user_id, current_user, "companies", "edit")

        submitted = {
            "name": name, "type_id": typeId, "company_type": companyType, "address": address,
            "email": email, "phone": phone, "location": location, "description": description,
            "website": website,
        }
        try:
            changes = CompanyUpdate(**{k: v for k, v in submitted.items() if v is not None})
        except ValidationError as e:
            raise validation_error(e)

        updates = changes.model_dump(exclude_unset=True)
        if updates.get("type_id") and "company_type" not in updates:
            updates["company_type"] = _type_name(db, updates["type_id"])

        logger.info(f"User {current_user.username} is updating company {company_id}")
        logo_url = await _upload_logo(storage, companyLogo)
        if logo_url:
            updates["logo_url"] = logo_url

        for field, value in updates.items():
            setattr(company, field, value)
        db.commit()
        db.refresh(company)

        logger.info(f"Company updated successfully: {company.name} (ID: {company.id})")
        return company

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating company {company_id}: {str(e)}", exc_info=True)
        raise server_error(e, "updating the company")


@router.delete("/{company_id}")
def delete_company(
    company_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a company together with its items, jobs and RFQs"""
    try:
        company = _get_company(db, company_id)
        ensure_owner_or_admin(company.user_id, current_user, "companies", "delete")

        logger.info(f"User {current_user.username} is deleting company {company_id}")
        items = db.query(Item).filter(Item.company_id == company_id).delete(synchronize_session=False)
        jobs = db.query(Job).filter(Job.company_id == company_id).delete(synchronize_session=False)
        db.query(Rfq).filter(Rfq.company_id == company_id).delete(synchronize_session=False)
        db.delete(company)
        db.commit()

        logger.info(f"Company {company_id} deleted with {items} items and {jobs} jobs")
        return {"message": "Company deleted successfully", "id": company_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting company {company_id}: {str(e)}", exc_info=True)
        raise server_error(e, "deleting the company")
