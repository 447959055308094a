"""
Shared pydantic base classes.

The public JSON API uses camelCase names (``hostName``, ``dateTime``)
while Python code works with snake_case attributes.  ``CamelModel``
generates the aliases and accepts either form on input.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Plain confirmation or error body."""

    message: str = Field(..., examples=["Event deleted successfully"])
