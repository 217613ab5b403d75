from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import (
    Any,
    Callable,
    ContextManager,
    Dict,
    Generator,
    Iterable,
    List,
    Mapping,
    Optional,
    Type,
)

import pydantic
from sqlalchemy import delete as sql_delete
from sqlalchemy import update as sql_update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from career_data_api.db.kinds import (
    EDUCATIONS,
    EXPERIENCES,
    PROFILE_REQUIRED,
    PROJECTS,
    SKILLS,
    TAG,
    TEXT,
    EntityKind,
)
from career_data_api.db.models import PROFILE_SLOT, CareerProfile
from career_data_api.db.session import get_session_factory, session_scope
from career_data_api.db.utils import (
    is_valid_id,
    missing_required,
    new_id,
    normalize_id,
    row_to_record,
    to_columns,
    utcnow,
)
from career_data_api.errors import (
    DatabaseError,
    ValidationError,
    classify_store_error,
    missing_fields_error,
)
from career_data_api.schemas import ProfileInput

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Clock = Callable[[], datetime]

_IMMUTABLE_FIELDS = ("id", "createdAt", "updatedAt")
_UPSERT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def _validate_payload(
    model: Type[pydantic.BaseModel],
    fields: Mapping[str, Any],
    entity_name: str,
    required: Iterable[str] = (),
    missing_prefix: str = "Missing required fields",
    partial: bool = False,
) -> Dict[str, Any]:
    """Validate a camelCase payload and return it dumped by alias.

    Type errors and blank required fields are reported together in one
    ``ValidationError``.
    """
    fields = fields or {}
    required = list(required)
    blocked = [name for name in _IMMUTABLE_FIELDS if name in fields]
    if blocked:
        raise ValidationError(
            f"{entity_name} fields are assigned by the store: {', '.join(blocked)}", blocked
        )
    try:
        payload = model.model_validate(dict(fields))
    except pydantic.ValidationError as exc:
        names: List[str] = []
        for err in exc.errors():
            name = ".".join(str(part) for part in err.get("loc", ()))
            if name and name not in names:
                names.append(name)
        names.extend(n for n in missing_required(fields, required) if n not in names)
        raise ValidationError(
            f"Invalid {entity_name.lower()} fields: {', '.join(names)}", names
        ) from exc

    data = payload.model_dump(by_alias=True, exclude_unset=partial)
    missing = missing_required(data, required)
    if missing:
        raise missing_fields_error(missing, prefix=missing_prefix)
    return data


def _check_id(entity_id: Any, entity_name: str) -> str:
    if not is_valid_id(entity_id):
        raise ValidationError(f"Invalid {entity_name.lower()} ID format", ["id"])
    return normalize_id(entity_id)


class _StoreBase:
    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or utcnow

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Session that commits on success; driver errors come out classified."""
        try:
            factory = self._session_factory or get_session_factory()
            with session_scope(factory) as db:
                yield db
        except SQLAlchemyError as exc:
            raise classify_store_error(exc) from exc


class EntityRepository(_StoreBase):
    """Generic CRUD over one record kind, configured by an ``EntityKind``."""

    def __init__(
        self,
        kind: EntityKind,
        session_factory: Optional[sessionmaker] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(session_factory, clock)
        self.kind = kind

    @property
    def entity_name(self) -> str:
        return self.kind.entity_name

    def list(self, filters: Mapping[str, Any] | None = None) -> List[Record]:
        criteria = self.kind.parse_filters(filters)
        model = self.kind.model
        with self.transaction() as db:
            query = db.query(model)
            for definition, value in criteria:
                column = getattr(model, definition.column)
                if definition.mode == TEXT:
                    query = query.filter(column.icontains(value, autoescape=True))
                elif definition.mode != TAG:
                    query = query.filter(column == value)
            rows = query.order_by(*self.kind.ordering(model)).all()

        # List columns are JSON, so membership is checked after loading.
        tag_criteria = [(d, v) for d, v in criteria if d.mode == TAG]
        if tag_criteria:
            rows = [
                row
                for row in rows
                if all(value in (getattr(row, d.column) or []) for d, value in tag_criteria)
            ]
        return [row_to_record(row) for row in rows]

    def get_by_id(self, entity_id: str) -> Optional[Record]:
        entity_id = _check_id(entity_id, self.entity_name)
        with self.transaction() as db:
            row = db.get(self.kind.model, entity_id)
            return row_to_record(row) if row is not None else None

    def prepare(self, fields: Mapping[str, Any]) -> Any:
        """Validate a new record and build its unsaved row with id and timestamps."""
        data = _validate_payload(
            self.kind.input_model, fields, self.entity_name, required=self.kind.required
        )
        now = self._clock()
        return self.kind.model(id=new_id(), created_at=now, updated_at=now, **to_columns(data))

    def create(self, fields: Mapping[str, Any]) -> Record:
        row = self.prepare(fields)
        with self.transaction() as db:
            db.add(row)
            db.flush()
            record = row_to_record(row)
        logger.info("Created %s %s", self.entity_name.lower(), record["id"])
        return record

    def update(self, entity_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        """Replace the supplied fields of an existing record.

        Args:
            entity_id: Store-assigned identifier.
            fields: Partial record; unsupplied fields keep their values.

        Returns:
            The updated record, or None when no record has this identifier.
        """
        entity_id = _check_id(entity_id, self.entity_name)
        supplied = [name for name in self.kind.required if name in (fields or {})]
        data = _validate_payload(
            self.kind.input_model,
            fields,
            self.entity_name,
            required=supplied,
            missing_prefix="Required fields cannot be empty",
            partial=True,
        )

        model = self.kind.model
        values = to_columns(data)
        values["updated_at"] = self._clock()
        with self.transaction() as db:
            result = db.execute(sql_update(model).where(model.id == entity_id).values(**values))
            if result.rowcount == 0:
                return None
            row = db.get(model, entity_id)
            record = row_to_record(row)
        logger.info("Updated %s %s", self.entity_name.lower(), entity_id)
        return record

    def delete(self, entity_id: str) -> bool:
        entity_id = _check_id(entity_id, self.entity_name)
        model = self.kind.model
        with self.transaction() as db:
            result = db.execute(sql_delete(model).where(model.id == entity_id))
            deleted = result.rowcount == 1
        if deleted:
            logger.info("Deleted %s %s", self.entity_name.lower(), entity_id)
        return deleted

    def delete_all(self, db: Session) -> int:
        """Delete every record of this kind inside the caller's transaction."""
        return db.execute(sql_delete(self.kind.model)).rowcount


class ProfileRepository(_StoreBase):
    """The singleton career profile: ``get`` and atomic ``upsert``."""

    entity_name = "Profile"

    def get(self) -> Optional[Record]:
        with self.transaction() as db:
            row = db.query(CareerProfile).filter(CareerProfile.slot == PROFILE_SLOT).first()
            return row_to_record(row) if row is not None else None

    def prepare(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate a full profile and return its column values."""
        data = _validate_payload(ProfileInput, fields, self.entity_name, required=PROFILE_REQUIRED)
        return to_columns(data)

    def write(self, db: Session, columns: Mapping[str, Any]) -> Record:
        """Insert or replace the profile with one statement on ``db``."""
        now = self._clock()
        dialect = db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise DatabaseError(
                f"Profile upsert is not supported on dialect {dialect}",
                reason="operation_failed",
            )
        stmt = insert(CareerProfile).values(
            id=new_id(), slot=PROFILE_SLOT, created_at=now, updated_at=now, **columns
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["slot"],
            set_={**columns, "updated_at": now},
        )
        db.execute(stmt)
        row = db.query(CareerProfile).filter(CareerProfile.slot == PROFILE_SLOT).one()
        return row_to_record(row)

    def upsert(self, fields: Mapping[str, Any]) -> Record:
        columns = self.prepare(fields)
        with self.transaction() as db:
            record = self.write(db, columns)
        logger.info("Upserted profile %s", record["id"])
        return record


@dataclass
class CareerStore:
    profile: ProfileRepository
    experiences: EntityRepository
    skills: EntityRepository
    projects: EntityRepository
    educations: EntityRepository

    def repository(self, collection: str) -> EntityRepository:
        repo = getattr(self, collection, None)
        if not isinstance(repo, EntityRepository):
            raise ValidationError(f"Unknown collection: {collection}", ["collection"])
        return repo

    def transaction(self) -> ContextManager[Session]:
        """One transaction spanning every repository of this store."""
        return self.profile.transaction()


def create_career_store(
    session_factory: Optional[sessionmaker] = None, clock: Optional[Clock] = None
) -> CareerStore:
    return CareerStore(
        profile=ProfileRepository(session_factory, clock),
        experiences=EntityRepository(EXPERIENCES, session_factory, clock),
        skills=EntityRepository(SKILLS, session_factory, clock),
        projects=EntityRepository(PROJECTS, session_factory, clock),
        educations=EntityRepository(EDUCATIONS, session_factory, clock),
    )


@lru_cache
def get_career_store() -> CareerStore:
    """Process default store; sessions come from the shared lazy engine."""
    return create_career_store()
