"""
Module: builder.py
Description: Builds payloads from change notifications.

Applies the relay's filters and normalizes cell values:
- notifications for the header row (row 1) are discarded
- edits are relayed only for the watched column (last column when unset)
- row inserts and form submissions are always relayed

Payload field order is fixed: row_number, timestamp, change_type, then
edited_column, old_value, new_value for edits, then one field per
header in column order.

Key Components:
- PayloadBuilder: notification -> Payload or None
- normalize_value(): cell value -> JSON scalar

Dependencies: datetime, decimal
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from sheethook.models.notification import ChangeNotification
from sheethook.models.payload import RESERVED_FIELDS, ChangeType, Payload, utc_timestamp
from sheethook.utils.logger import get_logger

logger = get_logger(__name__)

HEADER_ROW = 1


def normalize_value(value: Any) -> Any:
    """
    Convert a cell value into a JSON scalar.

    Blank cells become "", datetimes become UTC ISO 8601 strings and
    decimals become floats. Non-finite floats and anything else that is
    not a scalar are rendered with str().
    """
    if value is None:
        return ""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return utc_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def _named_value(value: Any) -> Any:
    # Form answers arrive as lists, one entry per response widget
    if isinstance(value, (list, tuple)):
        return ", ".join(str(normalize_value(item)) for item in value)
    return normalize_value(value)


def column_name(headers: List[str], column: int) -> str:
    """Header name of a 1-based column, or column_<n> when blank."""
    if 1 <= column <= len(headers):
        name = headers[column - 1]
        if name and name.strip():
            return name.strip()
    return f"column_{column}"


class PayloadBuilder:
    """
    Turns change notifications into payloads.

    Attributes:
        watched_column: 1-based column whose edits are relayed, or None
            to watch the last column of the sheet
    """

    def __init__(
        self,
        watched_column: Optional[int] = None,
        clock: Optional[Callable[[], str]] = None
    ):
        if watched_column is not None and watched_column < 1:
            raise ValueError("watched_column must be a positive integer")
        self.watched_column = watched_column
        self._clock = clock or utc_timestamp

    def effective_watched_column(self, notification: ChangeNotification) -> int:
        if self.watched_column is not None:
            return self.watched_column
        return max(len(notification.headers), len(notification.values))

    def discard_reason(self, notification: ChangeNotification) -> Optional[str]:
        """
        Explain why a notification produces no payload.

        Returns:
            A short reason, or None when a payload should be built
        """
        if notification.row == HEADER_ROW:
            return "header row"
        if notification.kind == ChangeType.EDIT:
            watched = self.effective_watched_column(notification)
            if notification.column != watched:
                return f"column {notification.column} is not the watched column {watched}"
        return None

    def build(self, notification: ChangeNotification) -> Optional[Payload]:
        """
        Build the payload for a notification.

        Args:
            notification: Change notification from the sheet trigger

        Returns:
            Payload, or None when the notification is filtered out
        """
        if self.discard_reason(notification) is not None:
            return None

        fields: Dict[str, Any] = {
            "row_number": notification.row,
            "timestamp": self._clock(),
            "change_type": notification.kind.value,
        }

        if notification.kind == ChangeType.EDIT:
            fields["edited_column"] = column_name(notification.headers, notification.column)
            fields["old_value"] = normalize_value(notification.old_value)
            fields["new_value"] = normalize_value(notification.new_value)

        named = notification.named_values or {}
        use_named = notification.kind == ChangeType.FORM_SUBMIT

        for index, header in enumerate(notification.headers):
            if not header or not header.strip():
                continue
            name = header.strip()
            if name in RESERVED_FIELDS:
                logger.warning(
                    "Skipping column that collides with a payload field",
                    header=name,
                    column=index + 1,
                    row_number=notification.row
                )
                continue

            if use_named and name in named:
                value = _named_value(named[name])
            elif index < len(notification.values):
                value = normalize_value(notification.values[index])
            else:
                value = ""
            fields[name] = value

        return Payload(data=fields)
