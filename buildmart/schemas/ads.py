from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class AdInput(BaseModel):
    """Title and link submitted with a create or update form"""
    title: str = Field(..., min_length=1, max_length=200)
    link: str = Field(..., min_length=1, max_length=500)

    @field_validator('title', 'link')
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f'{info.field_name} cannot be empty or whitespace only')
        return v.strip()


class AdStatusUpdate(BaseModel):
    status: Literal["on", "off"]


class AdResponse(BaseModel):
    id: str
    title: Optional[str] = None
    link: Optional[str] = None
    banner: Optional[str] = None
    status: Optional[str] = None


class AdListResponse(BaseModel):
    ads: List[dict]
    version: Optional[int] = None


class AdMutationResponse(BaseModel):
    message: str
    ad: AdResponse
    version: int
