"""
In-memory filter / sort / paginate pipeline for browse pages.

A FilterState only changes through reduce_filters(): each action replaces one
filter dimension and keeps every other dimension as it was, so a caller never
has to resend the rest of the state to avoid clobbering it.
"""
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

DEFAULT_PRICE_RANGE = (0.0, 10000.0)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SORT_LATEST = "latest"
SORT_OLDEST = "oldest"
SORT_NAME = "name"
SORT_TITLE = "title"
SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"

FEATURED_LIMIT = 3


@dataclass(frozen=True)
class FilterState:
    search: str = ""
    categories: Tuple[str, ...] = ()
    price_range: Optional[Tuple[float, float]] = None
    owner_only: bool = False
    owner_id: Optional[str] = None
    location: str = ""
    sort: str = SORT_LATEST
    page: int = 1


# Actions, one per filter dimension

@dataclass(frozen=True)
class SetSearch:
    text: str


@dataclass(frozen=True)
class SetCategories:
    values: Tuple[str, ...]


@dataclass(frozen=True)
class SetPriceRange:
    low: float = DEFAULT_PRICE_RANGE[0]
    high: float = DEFAULT_PRICE_RANGE[1]


@dataclass(frozen=True)
class SetOwnerOnly:
    enabled: bool
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SetLocation:
    text: str


@dataclass(frozen=True)
class SetSort:
    sort: str


@dataclass(frozen=True)
class SetPage:
    page: int


@dataclass(frozen=True)
class ResetFilters:
    pass


def reduce_filters(state: FilterState, action) -> FilterState:
    """
    Apply one action to the filter state and return the new state.
    Any change other than SetPage sends the user back to the first page.
    """
    if isinstance(action, SetPage):
        return replace(state, page=max(1, int(action.page)))
    if isinstance(action, SetSearch):
        return replace(state, search=action.text.strip(), page=1)
    if isinstance(action, SetCategories):
        values = tuple(v.strip() for v in action.values if v and v.strip())
        return replace(state, categories=values, page=1)
    if isinstance(action, SetPriceRange):
        low, high = float(action.low), float(action.high)
        if low > high:
            low, high = high, low
        return replace(state, price_range=(low, high), page=1)
    if isinstance(action, SetOwnerOnly):
        if action.enabled and not action.user_id:
            raise ValueError("An owner filter needs the current user's id")
        return replace(
            state,
            owner_only=action.enabled,
            owner_id=action.user_id if action.enabled else None,
            page=1,
        )
    if isinstance(action, SetLocation):
        return replace(state, location=action.text.strip(), page=1)
    if isinstance(action, SetSort):
        return replace(state, sort=action.sort, page=1)
    if isinstance(action, ResetFilters):
        return FilterState()
    raise TypeError(f"Unknown filter action: {action!r}")


@dataclass(frozen=True)
class ListProfile:
    """How one entity type is searched, filtered, sorted and paged"""
    kind: str
    search_fields: Tuple[str, ...]
    page_size: int
    sorts: Tuple[str, ...]
    date_field: str
    name_field: Optional[str] = None
    category_field: Optional[str] = None
    price_field: Optional[str] = None
    location_field: Optional[str] = None
    owner_field: Optional[str] = "userId"
    separate_featured: bool = False
    category_labels: Mapping[str, str] = field(default_factory=dict)

    def category_of(self, record: Mapping[str, Any]) -> str:
        raw = record.get(self.category_field) or ""
        return self.category_labels.get(raw, raw)


# Article slugs used by older documents, mapped to the labels offered as filters
ARTICLE_CATEGORY_LABELS = {
    "future-projects": "Project Updates",
    "rural-development": "Infrastructure",
    "sustainability": "Sustainability",
    "industry-news": "Industry News",
    "government-policies": "Government Policies",
    "construction-materials": "Construction Materials",
    "housing-real-estate": "Housing & Real Estate",
    "technology-innovation": "Technology & Innovation",
    "tenders-bids": "Tenders & Bids",
    "workforce-development": "Workforce Development",
    "web-content": "Web Content",
    "materials": "Construction Materials",
    "housing": "Housing & Real Estate",
    "workforce": "Workforce Development",
    "regulations": "Regulatory Changes",
}

PROFILES: Dict[str, ListProfile] = {
    "products": ListProfile(
        kind="products",
        search_fields=("name", "description", "categoryName", "companyName"),
        page_size=16,
        sorts=(SORT_LATEST, SORT_OLDEST, SORT_NAME, SORT_PRICE_LOW, SORT_PRICE_HIGH),
        date_field="createdAt",
        name_field="name",
        category_field="categoryName",
        price_field="price",
    ),
    "companies": ListProfile(
        kind="companies",
        search_fields=("name", "description", "companyType", "location"),
        page_size=9,
        sorts=(SORT_LATEST, SORT_OLDEST, SORT_NAME),
        date_field="createdAt",
        name_field="name",
        category_field="companyType",
        location_field="location",
    ),
    "jobs": ListProfile(
        kind="jobs",
        search_fields=("title", "description", "location", "type"),
        page_size=10,
        sorts=(SORT_LATEST, SORT_OLDEST, SORT_TITLE),
        date_field="createdAt",
        name_field="title",
        category_field="type",
        location_field="location",
    ),
    "tenders": ListProfile(
        kind="tenders",
        search_fields=("title", "excerpt", "category", "region", "publishedOn", "bidClosingDate", "bidOpeningDate"),
        page_size=5,
        sorts=(SORT_LATEST, SORT_OLDEST),
        date_field="publishedOn",
        category_field="category",
        owner_field=None,
        separate_featured=True,
    ),
    "articles": ListProfile(
        kind="articles",
        search_fields=("title", "excerpt", "author", "category"),
        page_size=5,
        sorts=(SORT_LATEST, SORT_OLDEST),
        date_field="published_date",
        category_field="category",
        owner_field=None,
        separate_featured=True,
        category_labels=ARTICLE_CATEGORY_LABELS,
    ),
}


def query_words(text: str) -> List[str]:
    return text.lower().split()


def matches_all_words(record: Mapping[str, Any], fields: Sequence[str], words: Sequence[str]) -> bool:
    """True iff every word is a substring of the concatenated fields (AND, case-insensitive)"""
    haystack = " ".join(str(record.get(f) or "") for f in fields).lower()
    return all(word in haystack for word in words)


def _timestamp(value) -> float:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str) and value:
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            moment = EPOCH
    else:
        moment = EPOCH
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def _price(record: Mapping[str, Any], price_field: str) -> float:
    value = record.get(price_field)
    return float(value) if value else 0.0


def sort_records(records: List[Dict[str, Any]], sort: str, profile: ListProfile) -> List[Dict[str, Any]]:
    if sort not in profile.sorts:
        sort = SORT_LATEST
    if sort == SORT_OLDEST:
        return sorted(records, key=lambda r: _timestamp(r.get(profile.date_field)))
    if sort in (SORT_NAME, SORT_TITLE):
        return sorted(records, key=lambda r: str(r.get(profile.name_field) or "").casefold())
    if sort == SORT_PRICE_LOW:
        return sorted(records, key=lambda r: _price(r, profile.price_field))
    if sort == SORT_PRICE_HIGH:
        return sorted(records, key=lambda r: _price(r, profile.price_field), reverse=True)
    return sorted(records, key=lambda r: _timestamp(r.get(profile.date_field)), reverse=True)


def filter_records(records: Sequence[Dict[str, Any]], state: FilterState, profile: ListProfile) -> List[Dict[str, Any]]:
    """Ownership, free text, category, location and price filters, then sort"""
    result = list(records)

    if state.owner_only and profile.owner_field:
        result = [r for r in result if r.get(profile.owner_field) == state.owner_id]

    words = query_words(state.search)
    if words:
        result = [r for r in result if matches_all_words(r, profile.search_fields, words)]

    if state.categories and profile.category_field:
        selected = set(state.categories)
        result = [r for r in result if profile.category_of(r) in selected]

    if state.location and profile.location_field:
        needle = state.location.lower()
        result = [r for r in result if needle in str(r.get(profile.location_field) or "").lower()]

    if state.price_range is not None and profile.price_field:
        low, high = state.price_range
        result = [r for r in result if low <= _price(r, profile.price_field) <= high]

    return sort_records(result, state.sort, profile)


@dataclass(frozen=True)
class Page:
    items: List[Dict[str, Any]]
    total: int
    page: int
    pages: int
    page_size: int


def paginate(records: Sequence[Dict[str, Any]], page: int, page_size: int) -> Page:
    """Slice one page; pages past the end are empty"""
    total = len(records)
    pages = math.ceil(total / page_size) if page_size > 0 else 0
    page = max(1, page)
    start = (page - 1) * page_size
    return Page(
        items=list(records[start:start + page_size]),
        total=total,
        page=page,
        pages=pages,
        page_size=page_size,
    )


@dataclass(frozen=True)
class Listing:
    page: Page
    featured: List[Dict[str, Any]]


def filter_sort_paginate(records: Sequence[Dict[str, Any]], state: FilterState, profile: ListProfile) -> Listing:
    filtered = filter_records(records, state, profile)
    featured: List[Dict[str, Any]] = []
    if profile.separate_featured:
        featured = [r for r in filtered if r.get("featured")][:FEATURED_LIMIT]
        filtered = [r for r in filtered if not r.get("featured")]
    return Listing(page=paginate(filtered, state.page, profile.page_size), featured=featured)
