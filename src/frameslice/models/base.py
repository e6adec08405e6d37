"""
Base Model
==========

Shared pydantic configuration for the wire models.

The design-tool plugin speaks camelCase JSON. Models keep snake_case
attribute names and expose camelCase aliases; either form is accepted
on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """BaseModel with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump as JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
