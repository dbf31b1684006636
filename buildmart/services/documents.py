"""
Markdown documents with YAML front matter (tenders and articles).

Decoding is strict: every document becomes a ParseResult holding either the
decoded document or the DocumentParseError that rejected it. keep_valid() is the
single place where malformed documents are dropped, so one corrupt file never
fails a whole listing or search.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from buildmart.services.storage_service import BlobStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TENDERS_FOLDER = "tenders"
ARTICLES_FOLDER = "articles"

FRONT_MATTER_DELIMITER = "---"
PARAGRAPH_RE = re.compile(r"\n\n([^\n]+)")

TENDER_EXCERPT_FALLBACK = "Click to view full tender document."
ARTICLE_EXCERPT_FALLBACK = "Click to view full article."

T = TypeVar("T")


class DocumentParseError(Exception):
    def __init__(self, filename: str, reason: str):
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    filename: str
    document: Optional[T] = None
    error: Optional[DocumentParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _to_text(value):
    # YAML turns bare dates and numbers into native types
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class TenderFrontMatter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tender_no: int = 0
    title: Optional[str] = None
    closing: Optional[str] = None
    opening: Optional[str] = None
    region: Optional[str] = None
    category: Optional[str] = None
    published: Optional[str] = None
    featured: bool = False

    @field_validator("title", "closing", "opening", "region", "category", "published", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _to_text(v)

    @field_validator("tender_no", "featured", mode="before")
    @classmethod
    def none_to_default(cls, v, info):
        if v is None:
            return 0 if info.field_name == "tender_no" else False
        return v


class ArticleFrontMatter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    published_date: Optional[str] = None
    image: Optional[str] = None
    read_time: Optional[str] = None
    featured: bool = False
    views: int = 0

    @field_validator("title", "slug", "excerpt", "category", "author", "published_date", "image", "read_time",
                     mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _to_text(v)

    @field_validator("featured", "views", mode="before")
    @classmethod
    def none_to_default(cls, v, info):
        if v is None:
            return False if info.field_name == "featured" else 0
        return v


class TenderDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    tender_no: int = Field(alias="tenderNo")
    title: str
    slug: str
    excerpt: str
    content: str
    category: str
    published_on: str = Field(alias="publishedOn")
    bid_closing_date: str = Field(alias="bidClosingDate")
    bid_opening_date: str = Field(alias="bidOpeningDate")
    region: str
    featured: bool = False


class ArticleDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    category: str
    published_date: str
    author: str
    file_type: str = Field(default="md", alias="fileType")
    image: Optional[str] = None
    read_time: Optional[str] = None
    featured: bool = False
    views: int = 0


def split_front_matter(filename: str, text: str):
    """
    Split a markdown document into (front matter mapping, body).

    A document without a leading delimiter has empty front matter.

    Raises:
        DocumentParseError: unterminated block, invalid YAML, or a non-mapping block
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, text

    for idx in range(1, len(lines)):
        if lines[idx].strip() == FRONT_MATTER_DELIMITER:
            break
    else:
        raise DocumentParseError(filename, "front matter is not terminated")

    try:
        data = yaml.safe_load("".join(lines[1:idx]))
    except yaml.YAMLError as e:
        raise DocumentParseError(filename, f"invalid YAML front matter ({e.__class__.__name__})")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DocumentParseError(filename, "front matter must be a mapping")
    return data, "".join(lines[idx + 1:])


def build_excerpt(body: str, limit: int, fallback: str) -> str:
    """First non-empty paragraph that follows a blank line, cut to limit characters"""
    for match in PARAGRAPH_RE.finditer("\n" + body):
        paragraph = match.group(1).strip()
        if paragraph:
            return paragraph[:limit] + "..."
    return fallback


def document_id(filename: str) -> str:
    return re.sub(r"\.md$", "", filename)


def decode_tender(filename: str, text: str, excerpt_length: int = 250) -> ParseResult[TenderDocument]:
    try:
        data, body = split_front_matter(filename, text)
        meta = TenderFrontMatter.model_validate(data)
    except DocumentParseError as e:
        return ParseResult(filename, error=e)
    except ValidationError as e:
        return ParseResult(filename, error=DocumentParseError(filename, f"invalid front matter: {e.error_count()} error(s)"))

    doc_id = document_id(filename)
    document = TenderDocument(
        id=doc_id,
        tender_no=meta.tender_no,
        title=meta.title or "Untitled Tender",
        slug=meta.opening or doc_id,
        excerpt=build_excerpt(body, excerpt_length, TENDER_EXCERPT_FALLBACK),
        content=body,
        category=meta.category or "General",
        published_on=meta.published or "N/A",
        bid_closing_date=meta.closing or "N/A",
        bid_opening_date=meta.opening or "N/A",
        region=meta.region or "N/A",
        featured=meta.featured,
    )
    return ParseResult(filename, document=document)


def decode_article(filename: str, text: str, excerpt_length: int = 250) -> ParseResult[ArticleDocument]:
    try:
        data, body = split_front_matter(filename, text)
        meta = ArticleFrontMatter.model_validate(data)
    except DocumentParseError as e:
        return ParseResult(filename, error=e)
    except ValidationError as e:
        return ParseResult(filename, error=DocumentParseError(filename, f"invalid front matter: {e.error_count()} error(s)"))

    doc_id = document_id(filename)
    document = ArticleDocument(
        id=doc_id,
        title=meta.title or "Untitled Article",
        slug=meta.slug or doc_id,
        excerpt=build_excerpt(body, excerpt_length, ARTICLE_EXCERPT_FALLBACK),
        content=body,
        category=meta.category or "General",
        published_date=meta.published_date or "N/A",
        author=meta.author or "Admin",
        image=meta.image,
        read_time=meta.read_time,
        featured=meta.featured,
        views=meta.views,
    )
    return ParseResult(filename, document=document)


def keep_valid(results: Iterable[ParseResult[T]]) -> List[T]:
    """Drop malformed documents, logging each one, and keep the rest in order"""
    documents = []
    for result in results:
        if result.ok:
            documents.append(result.document)
        else:
            logger.warning(f"Skipping malformed document {result.error}")
    return documents


def list_filenames(storage: BlobStorage, folder: str) -> List[str]:
    prefix = f"{folder}/"
    return [key[len(prefix):] for key in storage.list_keys(prefix) if key != prefix and not key.endswith("/")]


def load_documents(
    storage: BlobStorage,
    folder: str,
    decoder: Callable[[str, str, int], ParseResult[T]],
    excerpt_length: int = 250,
) -> List[T]:
    """
    Fetch and decode every document under folder/.
    Scans the whole prefix on every call; nothing is cached.
    """
    results = []
    for filename in list_filenames(storage, folder):
        try:
            stored = storage.get_text(f"{folder}/{filename}")
        except Exception as e:
            logger.error(f"Error fetching {folder}/{filename}: {str(e)}")
            results.append(ParseResult(filename, error=DocumentParseError(filename, "could not be fetched")))
            continue
        if stored is None:
            continue
        results.append(decoder(filename, stored.text, excerpt_length))
    return keep_valid(results)
