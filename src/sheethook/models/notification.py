"""
Module: notification.py
Description: Inbound change notification model.

A ChangeNotification is the already-extracted description of a sheet
event forwarded by the sheet-side trigger. The relay never reads the
sheet itself; everything it needs arrives in this structure.

Key Components:
- ChangeNotification: request model for POST /notifications

Dependencies: pydantic, typing
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sheethook.models.payload import ChangeType


class ChangeNotification(BaseModel):
    """
    Change notification forwarded by the sheet trigger.

    Attributes:
        kind: Which trigger fired (EDIT, INSERT_ROW, FORM_SUBMIT)
        row: 1-based index of the affected row (row 1 holds the headers)
        column: 1-based index of the edited column (edits only)
        headers: Header names in column order
        values: Current cell values of the affected row, in column order
        old_value: Cell value before the edit (edits only)
        new_value: Cell value after the edit (edits only)
        named_values: Form answers keyed by question title (form submissions only)
        sheet_name: Name of the origin sheet, used for logging only
    """

    model_config = ConfigDict(extra="ignore")

    kind: ChangeType = Field(
        ...,
        description="Notification kind"
    )
    row: int = Field(
        ...,
        ge=1,
        description="Affected row index (1-based)"
    )
    column: Optional[int] = Field(
        default=None,
        ge=1,
        description="Affected column index (1-based, edits only)"
    )
    headers: List[str] = Field(
        default_factory=list,
        description="Ordered header names of the sheet"
    )
    values: List[Any] = Field(
        default_factory=list,
        description="Current row values in column order"
    )
    old_value: Any = Field(
        default=None,
        description="Previous value of the edited cell"
    )
    new_value: Any = Field(
        default=None,
        description="New value of the edited cell"
    )
    named_values: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Form answers keyed by question title"
    )
    sheet_name: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Origin sheet name"
    )

    @model_validator(mode='after')
    def validate_edit_fields(self) -> 'ChangeNotification':
        """Edits must say which column changed."""
        if self.kind == ChangeType.EDIT and self.column is None:
            raise ValueError("column is required for EDIT notifications")
        return self
