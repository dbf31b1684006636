from pydantic import BaseModel, Field, field_validator


def check_filename(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Filename cannot be empty')
    if "/" in v or "\\" in v or v.startswith("."):
        raise ValueError('Filename must be a plain file name')
    return v


class DocumentCreate(BaseModel):
    """Markdown document written under the tenders/ or articles/ prefix"""
    filename: str = Field(..., min_length=1, max_length=255, examples=["road-works-2024.md"])
    content: str = Field(..., min_length=1)

    @field_validator('filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        return check_filename(v)


class DocumentCreated(BaseModel):
    message: str
    url: str
