"""
Module: payload.py
Description: Payload model for change deliveries.

A Payload is the normalized, immutable description of one change in the
source sheet. Its fields keep insertion order because the delivery
signature is computed over the exact serialized bytes.

Key Components:
- ChangeType: EDIT, INSERT_ROW, FORM_SUBMIT
- Payload: frozen ordered mapping of scalar fields
- utc_timestamp(): creation timestamp helper

Dependencies: pydantic, datetime, enum, types
"""

import math
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr, field_validator

Scalar = Union[StrictBool, StrictInt, StrictFloat, StrictStr]

RESERVED_FIELDS = (
    "row_number",
    "timestamp",
    "change_type",
    "edited_column",
    "old_value",
    "new_value",
)


class ChangeType(str, Enum):
    """Kind of change observed on the source sheet."""

    EDIT = "EDIT"
    INSERT_ROW = "INSERT_ROW"
    FORM_SUBMIT = "FORM_SUBMIT"


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Render a moment as ISO 8601 UTC with milliseconds and a Z suffix.

    Naive datetimes are taken to be UTC already.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Payload(BaseModel):
    """
    Immutable, ordered set of fields describing one change.

    The first three fields are always row_number, timestamp and
    change_type. Edit payloads continue with edited_column, old_value
    and new_value; the domain fields named after the sheet headers
    follow.

    Attributes:
        data: Read-only ordered mapping of field name to scalar value
    """

    model_config = ConfigDict(frozen=True)

    data: Mapping[str, Scalar]

    @field_validator('data', mode='before')
    @classmethod
    def validate_fields(cls, v: Any) -> Dict[str, Any]:
        """Check the leading metadata fields before scalar validation."""
        if not isinstance(v, Mapping):
            raise ValueError("data must be a mapping")

        keys = list(v.keys())
        if keys[:3] != ["row_number", "timestamp", "change_type"]:
            raise ValueError("data must start with row_number, timestamp, change_type")

        timestamp = v["timestamp"]
        if not isinstance(timestamp, str) or not timestamp:
            raise ValueError("timestamp must be a non-empty string")

        row_number = v["row_number"]
        if isinstance(row_number, bool) or not isinstance(row_number, int) or row_number < 1:
            raise ValueError("row_number must be a positive integer")

        change_type = v["change_type"]
        if isinstance(change_type, ChangeType):
            change_type = change_type.value
        if change_type not in ChangeType.__members__:
            raise ValueError(f"change_type must be one of: {', '.join(ChangeType.__members__)}")

        for key, value in v.items():
            if not isinstance(key, str):
                raise ValueError("field names must be strings")
            if isinstance(value, float) and not math.isfinite(value):
                raise ValueError(f"field {key!r} is not a finite number")

        normalized = dict(v)
        normalized["change_type"] = change_type
        return normalized

    @field_validator('data', mode='after')
    @classmethod
    def freeze_fields(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @property
    def row_number(self) -> int:
        return self.data["row_number"]

    @property
    def timestamp(self) -> str:
        return self.data["timestamp"]

    @property
    def change_type(self) -> ChangeType:
        return ChangeType(self.data["change_type"])

    def as_dict(self) -> Dict[str, Any]:
        """Return an ordered, mutable copy of the fields."""
        return dict(self.data)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data
