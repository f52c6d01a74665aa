"""Base models with camelCase serialization for API output and storage."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for all API models; serializes field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class DocumentModel(CamelModel):
    """A record-store document.  ``id`` is assigned by the store on insert."""

    id: str = ""

    def to_document(self) -> dict[str, Any]:
        """Dump to a storable dict (camelCase keys, no ``id``)."""
        return self.model_dump(by_alias=True, exclude={"id"})
