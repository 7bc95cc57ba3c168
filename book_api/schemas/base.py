"""
Shared schema base classes.

The wire format uses camelCase keys (``fullName``, ``yearPublished``) while
Python code uses snake_case. CamelModel bridges the two: it accepts either
spelling on input and always emits camelCase in responses.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Envelope for operations that only report an outcome."""
    success: bool = True
    message: str
