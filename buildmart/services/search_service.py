"""
Site-wide search across products, companies, jobs, tenders and articles.

Relational entities are matched in SQL with case-insensitive LIKE; tenders and
articles are scanned from blob storage and matched in memory. Only products are
paginated. The result envelope holds exactly the requested entity types.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from buildmart.models.categories import ItemCategory
from buildmart.models.company import Company
from buildmart.models.items import Item
from buildmart.models.jobs import Job
from buildmart.schemas.companies import CompanyResponse
from buildmart.schemas.jobs import JobResponse
from buildmart.services.documents import (
    ARTICLES_FOLDER,
    TENDERS_FOLDER,
    decode_article,
    decode_tender,
    load_documents,
)
from buildmart.services.storage_service import BlobStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEARCH_TYPES = ("products", "companies", "tenders", "jobs", "articles")
DEFAULT_LIMIT = 16
SEARCH_EXCERPT_LENGTH = 150


def parse_types(types: Optional[str]) -> List[str]:
    """Comma list of entity types, in request order, unknown names dropped"""
    if not types:
        return list(SEARCH_TYPES)
    requested = []
    for name in types.split(","):
        name = name.strip().lower()
        if name in SEARCH_TYPES and name not in requested:
            requested.append(name)
    return requested


def _pattern(query: str) -> str:
    return f"%{query.lower()}%"


def product_summary(item: Item, company: Optional[Company], category: Optional[ItemCategory]) -> Dict:
    return {
        "id": item.id,
        "name": item.name,
        "company": company.name if company else None,
        "category": category.category if category else "Uncategorized",
        "price": float(item.price) if item.price else 0.0,
        "unit": item.unit,
        "imageUrls": item.image_urls or [],
        "companyPhone": (company.phone if company else None) or "",
        "companyEmail": (company.email if company else None) or "",
        "description": item.description,
        "isOwner": False,
        "userId": item.user_id,
        "companyId": item.company_id,
        "categoryId": item.category_id,
        "createdAt": item.created_at,
    }


def search_items(db: Session, query: str, limit: int = DEFAULT_LIMIT, offset: int = 0) -> List[Dict]:
    pattern = _pattern(query)
    rows = (
        db.query(Item, Company, ItemCategory)
        .outerjoin(Company, Item.company_id == Company.id)
        .outerjoin(ItemCategory, Item.category_id == ItemCategory.id)
        .filter(
            or_(
                func.lower(Item.name).like(pattern),
                func.lower(Item.description).like(pattern),
                func.lower(Company.name).like(pattern),
                func.lower(ItemCategory.category).like(pattern),
            )
        )
        .order_by(Item.created_at.desc(), Item.id)
        .limit(limit)
        .offset(offset)
        .all()
    )
    return [product_summary(item, company, category) for item, company, category in rows]


def company_summary(company: Company) -> Dict:
    data = CompanyResponse.model_validate(company).model_dump(by_alias=True)
    data["description"] = company.description or ""
    data["location"] = company.location or ""
    data["companyType"] = company.company_type or "General"
    data["isVerified"] = bool(company.is_verified)
    return data


def search_companies(db: Session, query: str) -> List[Dict]:
    pattern = _pattern(query)
    companies = (
        db.query(Company)
        .filter(
            or_(
                func.lower(Company.name).like(pattern),
                func.lower(Company.description).like(pattern),
                func.lower(Company.company_type).like(pattern),
                func.lower(Company.location).like(pattern),
            )
        )
        .order_by(Company.created_at.desc())
        .all()
    )
    return [company_summary(c) for c in companies]


def job_summary(job: Job) -> Dict:
    return JobResponse.model_validate(job).model_dump(by_alias=True)


def search_jobs(db: Session, query: str) -> List[Dict]:
    pattern = _pattern(query)
    jobs = (
        db.query(Job)
        .outerjoin(Company, Job.company_id == Company.id)
        .filter(
            or_(
                func.lower(Job.title).like(pattern),
                func.lower(Job.description).like(pattern),
                func.lower(Company.name).like(pattern),
                func.lower(Job.location).like(pattern),
                func.lower(Job.category).like(pattern),
                func.lower(Job.type).like(pattern),
                func.lower(Job.position).like(pattern),
                func.lower(cast(Job.required_skills, String)).like(pattern),
                func.lower(Job.qualifications).like(pattern),
            )
        )
        .order_by(Job.created_at.desc())
        .all()
    )
    return [job_summary(j) for j in jobs]


def _text_matches(query: str, parts: Iterable[Optional[str]]) -> bool:
    return query in " ".join(p or "" for p in parts).lower()


def search_tenders(storage: Optional[BlobStorage], query: str) -> List[Dict]:
    if storage is None:
        return []
    tenders = load_documents(storage, TENDERS_FOLDER, decode_tender, SEARCH_EXCERPT_LENGTH)
    query = query.lower()
    return [
        t.model_dump(by_alias=True)
        for t in tenders
        if _text_matches(
            query,
            (t.title, t.category, t.excerpt, t.content, t.region, t.bid_closing_date, t.bid_opening_date),
        )
    ]


def search_articles(storage: Optional[BlobStorage], query: str) -> List[Dict]:
    if storage is None:
        return []
    articles = load_documents(storage, ARTICLES_FOLDER, decode_article, SEARCH_EXCERPT_LENGTH)
    query = query.lower()
    return [
        a.model_dump(by_alias=True)
        for a in articles
        if _text_matches(query, (a.title, a.category, a.excerpt, a.content, a.author))
    ]


def search(
    db: Session,
    storage: Optional[BlobStorage],
    query: str = "",
    types: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, List[Dict]]:
    """
    Run the search for each requested type.

    Raises:
        SQLAlchemyError: any relational lookup failure; the route turns it into a 500
    """
    query = (query or "").lower()
    page = max(1, page)
    limit = max(1, limit)
    results: Dict[str, List[Dict]] = {}

    for name in parse_types(types):
        if name == "products":
            results[name] = search_items(db, query, limit=limit, offset=(page - 1) * limit)
        elif name == "companies":
            results[name] = search_companies(db, query)
        elif name == "jobs":
            results[name] = search_jobs(db, query)
        elif name == "tenders":
            results[name] = search_tenders(storage, query)
        elif name == "articles":
            results[name] = search_articles(storage, query)

    logger.info(
        f"Search '{query}' returned " + ", ".join(f"{k}={len(v)}" for k, v in results.items())
    )
    return results
