# mmc_admin/schemas/common.py
"""Common schemas used across multiple modules."""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mmc_admin.core.clock import as_utc

# Timestamps are stored and returned as aware UTC
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """
    Base for API payloads.

    The website frontend speaks camelCase JSON (``publishDate``, ``seoTitle``);
    fields are declared in snake_case and accepted under either name.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Response for operations that only confirm success."""
    message: str
