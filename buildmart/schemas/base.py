from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case attributes in Python, camelCase keys on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def blank_to_none(v):
    # multipart forms send "" for fields the user left empty
    if isinstance(v, str) and not v.strip():
        return None
    return v
