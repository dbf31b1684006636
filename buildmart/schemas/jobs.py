from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from buildmart.schemas.base import CamelModel, blank_to_none

JOB_TYPES = ("Full-time", "Part-time", "Contract", "Temporary", "Internship")


class JobBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=200, examples=["Site Engineer"])
    description: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=100)
    company_id: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    salary: Optional[str] = Field(None, max_length=100)
    type: Optional[str] = Field(None, max_length=50, examples=list(JOB_TYPES))
    position: Optional[str] = Field(None, max_length=100)
    experience: Optional[str] = Field(None, max_length=100)
    required_skills: List[str] = []
    qualifications: Optional[str] = None
    how_to_apply: Optional[str] = None
    additional_notes: Optional[str] = None
    application_link: Optional[str] = Field(None, max_length=500)
    deadline: Optional[datetime] = None

    @field_validator('title', 'description')
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f'{info.field_name} cannot be empty or whitespace only')
        return v.strip()

    @field_validator('deadline', 'company_id', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        return blank_to_none(v)

    @field_validator('required_skills', mode='before')
    @classmethod
    def default_skills(cls, v):
        return v or []


class JobCreate(JobBase):
    pass


class JobUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, max_length=100)
    company_id: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    salary: Optional[str] = Field(None, max_length=100)
    type: Optional[str] = Field(None, max_length=50)
    position: Optional[str] = Field(None, max_length=100)
    experience: Optional[str] = Field(None, max_length=100)
    required_skills: Optional[List[str]] = None
    qualifications: Optional[str] = None
    how_to_apply: Optional[str] = None
    additional_notes: Optional[str] = None
    application_link: Optional[str] = Field(None, max_length=500)
    deadline: Optional[datetime] = None

    @field_validator('title', 'description')
    @classmethod
    def validate_not_empty(cls, v: Optional[str], info) -> str:
        # Only runs for fields the client sent; leaving them out keeps the stored value
        if v is None or not v.strip():
            raise ValueError(f'{info.field_name} cannot be null, empty or whitespace only')
        return v.strip()

    @field_validator('deadline', mode='before')
    @classmethod
    def empty_deadline(cls, v):
        return blank_to_none(v)


class JobResponse(JobBase):
    id: str
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
