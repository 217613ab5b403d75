from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping

from pydantic.alias_generators import to_camel, to_snake

_ID_RE = re.compile(r"[0-9a-fA-F]{32}")

# Columns that exist for storage mechanics only and never appear in records.
HIDDEN_COLUMNS = {"slot"}


def new_id() -> str:
    return uuid.uuid4().hex


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None


def normalize_id(value: str) -> str:
    return value.lower()


def utcnow() -> datetime:
    """Naive UTC timestamp, stored identically by every supported dialect."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def lookup(data: Mapping[str, Any], dotted: str) -> Any:
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def missing_required(data: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    return [name for name in required if is_blank(lookup(data, name))]


def strip_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_none(v) for v in value]
    return value


def to_columns(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map camelCase record keys to snake_case column attributes."""
    return {to_snake(key): strip_none(value) for key, value in data.items()}


def row_to_record(row: Any) -> Dict[str, Any]:
    """Convert an ORM row to a camelCase record dict with a string ``id``."""
    record: Dict[str, Any] = {}
    for column in row.__table__.columns:
        if column.key in HIDDEN_COLUMNS:
            continue
        value = getattr(row, column.key)
        if column.key == "id":
            value = str(value)
        record[to_camel(column.key)] = value
    return record
