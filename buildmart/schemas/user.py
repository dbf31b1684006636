from typing import Optional

from pydantic import Field, field_validator

from buildmart.schemas.base import CamelModel, blank_to_none


class UserBase(CamelModel):
    full_name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)

    @field_validator('full_name', 'email', 'phone', 'company', 'bio', 'location', mode='before')
    @classmethod
    def empty_form_value(cls, v):
        return blank_to_none(v)


class UserCreate(UserBase):
    username: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Unique login name",
        examples=["acme_admin"]
    )
    password: str = Field(..., min_length=6, max_length=128)
    profile_picture_url: Optional[str] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError('Username cannot be empty or contain whitespace')
        return v


class UserLogin(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserUpdate(UserBase):
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    profile_picture_url: Optional[str] = None


class UserResponse(UserBase):
    id: str
    username: str
    profile_picture_url: Optional[str] = None
    role: Optional[str] = None


class MeResponse(CamelModel):
    authenticated: bool
    user: Optional[UserResponse] = None
