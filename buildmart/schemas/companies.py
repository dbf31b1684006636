from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from buildmart.schemas.base import CamelModel, blank_to_none


class CompanyBase(CamelModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Company name (1-200 characters)",
        examples=["Acme Builders"]
    )
    type_id: Optional[str] = Field(None, description="Company type reference")
    company_type: Optional[str] = Field(None, max_length=100, description="Company type display name")
    address: Optional[str] = None
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=300)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Company name cannot be empty or whitespace only')
        return v.strip()

    @field_validator('type_id', 'company_type', 'address', 'email', 'phone', 'location', 'description', 'website',
                     mode='before')
    @classmethod
    def empty_form_value(cls, v):
        return blank_to_none(v)


class CompanyCreate(CompanyBase):
    logo_url: Optional[str] = None


class CompanyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type_id: Optional[str] = None
    company_type: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=300)
    logo_url: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError('Company name cannot be empty or whitespace only')
        return v.strip() if v else v


class CompanyResponse(CompanyBase):
    id: str
    user_id: str
    logo_url: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None
