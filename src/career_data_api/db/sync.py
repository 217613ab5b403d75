from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping

from career_data_api.db.kinds import ENTITY_KINDS
from career_data_api.db.repository import CareerStore, Record
from career_data_api.db.utils import strip_none
from career_data_api.errors import ValidationError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "career_data_v1"

# Assigned by the store on import, so never written to a snapshot.
_STORE_FIELDS = ("id", "createdAt", "updatedAt")


def _portable(record: Record) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in record.items():
        if key in _STORE_FIELDS:
            continue
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        data[key] = value
    return strip_none(data)


def export_career_data(store: CareerStore) -> Dict[str, Any]:
    profile = store.profile.get()
    data: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "profile": _portable(profile) if profile else None,
    }
    for collection in ENTITY_KINDS:
        records = store.repository(collection).list()
        data[collection] = [_portable(r) for r in records]
    return data


def write_career_json(path: str | Path, data: Mapping[str, Any]) -> Dict[str, Any]:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return dict(data)


def read_career_json(path: str | Path) -> Dict[str, Any]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValidationError("Career snapshot must be a JSON object")
    return data


def import_career_data(
    store: CareerStore, data: Mapping[str, Any], replace: bool = False
) -> Dict[str, int]:
    """Load a snapshot in one transaction.

    Every record is validated before anything is written, so an invalid
    snapshot leaves the store untouched even with ``replace``.

    Args:
        store: Destination store.
        data: Snapshot produced by ``export_career_data``.
        replace: Delete existing experiences, skills, projects and educations first.

    Returns:
        Number of records written per collection (``profile`` is 0 or 1).
    """
    version = data.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported snapshot schema_version: {version}", ["schema_version"]
        )

    profile_columns = store.profile.prepare(data["profile"]) if data.get("profile") else None
    prepared: Dict[str, List[Any]] = {}
    for collection in ENTITY_KINDS:
        repo = store.repository(collection)
        items: List[Any] = data.get(collection) or []
        prepared[collection] = [repo.prepare(item) for item in items if isinstance(item, dict)]

    counts: Dict[str, int] = {"profile": 0}
    with store.transaction() as db:
        if profile_columns is not None:
            store.profile.write(db, profile_columns)
            counts["profile"] = 1
        for collection, rows in prepared.items():
            if replace:
                store.repository(collection).delete_all(db)
            db.add_all(rows)
            counts[collection] = len(rows)

    logger.info("Imported career snapshot: %s", counts)
    return counts
