"""Shared Pydantic base for the HTTP layer.

Clients speak camelCase (``examId``, ``isGraded``); Python code keeps
snake_case attributes.  Both spellings are accepted on input, and
FastAPI serializes responses by alias.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
