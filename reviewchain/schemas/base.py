"""
Shared schema building blocks.

The storefront speaks camelCase JSON (``reviewId``, ``walletAddress``) while
the Python side uses snake_case attributes. CamelModel bridges the two:
fields are declared in snake_case, serialized by alias, and accepted in
either form.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from reviewchain.utils.timestamps import format_timestamp

# Datetime rendered as "2024-05-01T12:30:45.123Z" in both python and json dumps
Timestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str)]


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
