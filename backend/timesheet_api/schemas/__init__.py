"""
Pydantic schemas for API request/response validation.

Field names are snake_case in Python and camelCase on the wire, matching
the JSON documents kept in the key-value store.
"""
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from ..utils import to_iso


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def changes(self, nullable: Tuple[str, ...] = ()) -> Dict[str, Any]:
        """
        Fields the caller actually sent, keyed by their wire names.

        Explicit nulls are dropped unless the wire name is listed in
        ``nullable``. Datetimes are rendered as ISO-8601 UTC strings.
        """
        data = self.model_dump(by_alias=True, exclude_unset=True)
        return {
            key: to_iso(value) if isinstance(value, datetime) else value
            for key, value in data.items()
            if value is not None or key in nullable
        }


class StandardResponse(CamelModel):
    """Generic success response."""
    success: bool = True
    message: Optional[str] = None
