"""Relational records flattened to their wire shape for lists and browse pages"""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from buildmart.models.company import Company
from buildmart.models.items import Item
from buildmart.models.jobs import Job
from buildmart.schemas.companies import CompanyResponse
from buildmart.schemas.jobs import JobResponse
from buildmart.schemas.products import ProductListItem


def product_record(item: Item) -> Dict:
    record = ProductListItem.model_validate(item)
    if item.company is not None:
        record.company_name = item.company.name
        record.company_phone = item.company.phone
        record.company_email = item.company.email
    if item.category is not None:
        record.category_name = item.category.category
    return record.model_dump(by_alias=True)


def load_products(db: Session, user_id: Optional[str] = None, company_id: Optional[str] = None) -> List[Dict]:
    query = db.query(Item).options(joinedload(Item.company), joinedload(Item.category))
    if user_id:
        query = query.filter(Item.user_id == user_id)
    if company_id:
        query = query.filter(Item.company_id == company_id)
    return [product_record(i) for i in query.order_by(Item.created_at.desc()).all()]


def load_companies(db: Session, user_id: Optional[str] = None) -> List[Dict]:
    query = db.query(Company)
    if user_id:
        query = query.filter(Company.user_id == user_id)
    return [
        CompanyResponse.model_validate(c).model_dump(by_alias=True)
        for c in query.order_by(Company.created_at.desc()).all()
    ]


def load_jobs(db: Session, user_id: Optional[str] = None) -> List[Dict]:
    query = db.query(Job)
    if user_id:
        query = query.filter(Job.user_id == user_id)
    return [
        JobResponse.model_validate(j).model_dump(by_alias=True)
        for j in query.order_by(Job.created_at.desc()).all()
    ]
