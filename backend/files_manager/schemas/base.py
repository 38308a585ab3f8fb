"""Base schema classes with camelCase alias generation.

Request and response schemas inherit from these. Python code stays
snake_case; JSON on the wire is camelCase (userId, parentId, isPublic).
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request bodies. Accepts camelCase or snake_case keys."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class CamelORMModel(CamelModel):
    """Base for response schemas. Reads from SQLAlchemy rows, outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
