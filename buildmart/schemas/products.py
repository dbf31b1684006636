from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from buildmart.models.items import UNITS
from buildmart.schemas.base import CamelModel, blank_to_none

MAX_PRODUCT_IMAGES = 3


def _check_unit(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in UNITS:
        raise ValueError(f"Unit must be one of: {', '.join(UNITS)}")
    return v


class ProductBase(CamelModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Product or service name (1-200 characters)",
        examples=["Portland Cement 50kg", "Excavator Rental"]
    )
    company_id: str = Field(..., min_length=1, description="Company offering the item")
    category_id: str = Field(..., min_length=1, description="Item category")
    price: Optional[float] = Field(None, ge=0, description="Price per unit (optional, 0 or greater)")
    unit: Optional[str] = Field(None, description="Unit of sale", examples=["bag", "Per day"])
    description: Optional[str] = Field(None, description="Free-text description")

    @field_validator('name')
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f'{info.field_name} cannot be empty or whitespace only')
        return v.strip()

    @field_validator('price', 'unit', 'description', mode='before')
    @classmethod
    def empty_form_value(cls, v):
        return blank_to_none(v)

    @field_validator('unit')
    @classmethod
    def validate_unit(cls, v: Optional[str]) -> Optional[str]:
        return _check_unit(v)


class ProductCreate(ProductBase):
    image_urls: List[str] = Field(
        ...,
        min_length=1,
        max_length=MAX_PRODUCT_IMAGES,
        description="Ordered image URLs (1-3)"
    )


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    company_id: Optional[str] = Field(None, min_length=1)
    category_id: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    description: Optional[str] = None
    image_urls: Optional[List[str]] = Field(None, min_length=1, max_length=MAX_PRODUCT_IMAGES)

    @field_validator('name')
    @classmethod
    def validate_not_empty(cls, v: Optional[str], info) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError(f'{info.field_name} cannot be empty or whitespace only')
        return v.strip() if v else v

    @field_validator('price', 'unit', mode='before')
    @classmethod
    def empty_form_value(cls, v):
        return blank_to_none(v)

    @field_validator('unit')
    @classmethod
    def validate_unit(cls, v: Optional[str]) -> Optional[str]:
        return _check_unit(v)


class ProductResponse(CamelModel):
    id: str
    name: str
    company_id: Optional[str] = None
    user_id: Optional[str] = None
    category_id: Optional[str] = None
    price: Optional[float] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    image_urls: List[str] = []
    created_at: Optional[datetime] = None

    @field_validator('image_urls', mode='before')
    @classmethod
    def default_images(cls, v):
        return v or []


class ProductListItem(ProductResponse):
    """Item with the display fields of its company and category"""
    company_name: str = "N/A"
    category_name: str = "Uncategorized"
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
