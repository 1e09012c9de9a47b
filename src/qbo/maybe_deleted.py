"""Live-or-deleted decoding for change feed records.

A change feed bucket mixes full entities with deletion markers:

    {"Id": "99", "status": "deleted", "MetaData": {"LastUpdatedTime": "..."}}

`decode_maybe_deleted` peeks at `status` and fills exactly one side of a
`MaybeDeleted`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import Field, ValidationError

from qbo.dates import QBODate
from qbo.errors import DecodeError
from qbo.models import Entity, QBOModel

DELETED_STATUS = "deleted"

E = TypeVar("E", bound=Entity)


class _TombstoneMetaData(QBOModel):
    last_updated_time: QBODate | None = None


class _TombstoneRecord(QBOModel):
    id: str
    status: str = Field(alias="status")
    meta_data: _TombstoneMetaData | None = None


@dataclass(frozen=True, slots=True)
class DeletedEntity:
    id: str
    status: str
    last_updated_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class MaybeDeleted(Generic[E]):
    """Either a live entity or a deletion marker, never both."""

    entity: E | None = None
    deleted: DeletedEntity | None = None

    def __post_init__(self) -> None:
        if (self.entity is None) == (self.deleted is None):
            raise ValueError("MaybeDeleted needs exactly one of entity/deleted")

    @property
    def is_deleted(self) -> bool:
        return self.deleted is not None

    @property
    def id(self) -> str | None:
        if self.deleted is not None:
            return self.deleted.id
        return self.entity.id


def decode_maybe_deleted(model: type[E], raw: Any, *, entity_type: str) -> MaybeDeleted[E]:
    if not isinstance(raw, dict):
        raise DecodeError(
            f"{entity_type} record must be a JSON object, got {type(raw).__name__}",
            entity_type=entity_type,
        )

    try:
        if raw.get("status") == DELETED_STATUS:
            tomb = _TombstoneRecord.model_validate(raw)
            return MaybeDeleted(
                deleted=DeletedEntity(
                    id=tomb.id,
                    status=tomb.status,
                    last_updated_time=tomb.meta_data.last_updated_time if tomb.meta_data else None,
                )
            )
        return MaybeDeleted(entity=model.model_validate(raw))
    except ValidationError as exc:
        raise DecodeError(f"Invalid {entity_type} record: {exc}", entity_type=entity_type) from exc


def decode_maybe_deleted_list(model: type[E], records: Any, *, entity_type: str) -> list[MaybeDeleted[E]]:
    """Decode a bucket (JSON array) of live records and tombstones, keeping order."""

    if not isinstance(records, list):
        raise DecodeError(
            f"{entity_type} bucket must be a JSON array, got {type(records).__name__}",
            entity_type=entity_type,
        )
    return [decode_maybe_deleted(model, r, entity_type=entity_type) for r in records]
