from typing import List, Literal, Optional

from pydantic import Field, field_validator

from buildmart.schemas.base import CamelModel, blank_to_none


class CategoryBase(CamelModel):
    """Base schema for item and tender categories"""
    category: str = Field(..., min_length=1, max_length=100, description="Category label")
    type: Literal["product", "service", "tender"] = Field(..., description="What the category classifies")
    parent_id: Optional[str] = Field(None, description="Parent category for a subcategory")

    @field_validator('category')
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Category cannot be empty or whitespace only')
        return v.strip()

    @field_validator('parent_id', mode='before')
    @classmethod
    def empty_parent(cls, v):
        return blank_to_none(v)


class CategoryCreate(CategoryBase):
    pass


class CategoryResponse(CategoryBase):
    id: str


class CategoryTree(CategoryResponse):
    """Top-level category with its direct subcategories"""
    subcategories: List[CategoryResponse] = []


class CompanyTypeResponse(CamelModel):
    id: str
    name: str


class CityResponse(CamelModel):
    id: str
    city: str
    region: Optional[str] = None


class UnitResponse(CamelModel):
    id: str
    name: str
