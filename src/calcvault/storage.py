"""
Workbook persistence.

A workbook record is the unit of persistence: a WorkbookConfig together with
its display metadata and timestamps. Stores are plain key-value stores keyed
by an opaque id. Writes are last-write-wins; there is no concurrency token.

Two stores are provided:
- InMemoryWorkbookStore: process-local dictionary
- JsonFileWorkbookStore: one JSON file per record in a directory
"""

from __future__ import annotations

import datetime
import json
import logging
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from calcvault.exceptions import WorkbookNotFound
from calcvault.spreadsheet.model import WorkbookConfig
from calcvault.utils.serialization import deserialize, serialize

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@dataclass(frozen=True)
class WorkbookRecord:
    """A persisted workbook.

    Attributes:
        id: Opaque identifier
        name: Workbook name
        description: Workbook description
        formula_config: The full configuration, formulas included
        metadata: rows, cols, fileName and uploadedAt
        created_at: ISO-8601 creation time
        updated_at: ISO-8601 time of the last write
    """
    id: str
    name: str
    description: str
    formula_config: WorkbookConfig
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def with_config(self, config: WorkbookConfig) -> "WorkbookRecord":
        """Copy of this record holding *config*, with updated_at refreshed."""
        return replace(
            self,
            name=config.name,
            description=config.description,
            formula_config=config,
            updated_at=_now(),
        )

    def summary(self) -> Dict[str, Any]:
        """Listing view: everything except the formula configuration."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "metadata": dict(self.metadata),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data["formulaConfig"] = serialize(self.formula_config)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkbookRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description") or "",
            formula_config=deserialize(data["formulaConfig"]),
            metadata=dict(data.get("metadata") or {}),
            created_at=data["createdAt"],
            updated_at=data["updatedAt"],
        )


def new_record(config: WorkbookConfig, file_name: Optional[str] = None) -> WorkbookRecord:
    """Build a record with a fresh id for a newly ingested configuration."""
    created = _now()
    return WorkbookRecord(
        id=uuid.uuid4().hex,
        name=config.name,
        description=config.description,
        formula_config=config,
        metadata={
            "rows": config.rows,
            "cols": config.cols,
            "fileName": file_name,
            "uploadedAt": created,
        },
        created_at=created,
        updated_at=created,
    )


class WorkbookStore(Protocol):
    """Key-value store of workbook records."""

    def get(self, workbook_id: str) -> WorkbookRecord:
        """Return the record, or raise WorkbookNotFound."""
        ...

    def put(self, record: WorkbookRecord) -> None:
        """Insert or replace a record."""
        ...

    def delete(self, workbook_id: str) -> None:
        """Remove a record, or raise WorkbookNotFound."""
        ...

    def list(self) -> List[WorkbookRecord]:
        """All records, newest first."""
        ...


class InMemoryWorkbookStore:
    """Dictionary-backed store. Contents vanish with the process."""

    def __init__(self) -> None:
        self._records: Dict[str, WorkbookRecord] = {}

    def get(self, workbook_id: str) -> WorkbookRecord:
        try:
            return self._records[workbook_id]
        except KeyError:
            raise WorkbookNotFound(workbook_id) from None

    def put(self, record: WorkbookRecord) -> None:
        self._records[record.id] = record

    def delete(self, workbook_id: str) -> None:
        if self._records.pop(workbook_id, None) is None:
            raise WorkbookNotFound(workbook_id)

    def list(self) -> List[WorkbookRecord]:
        return sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)


class JsonFileWorkbookStore:
    """Directory of ``<id>.json`` files, one per record."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, workbook_id: str) -> Path:
        # Ids are generated as uuid hex; refuse anything that could escape the directory
        if not workbook_id or not workbook_id.isalnum():
            raise WorkbookNotFound(workbook_id)
        return self.directory / f"{workbook_id}.json"

    def get(self, workbook_id: str) -> WorkbookRecord:
        path = self._path(workbook_id)
        if not path.exists():
            raise WorkbookNotFound(workbook_id)
        return WorkbookRecord.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def put(self, record: WorkbookRecord) -> None:
        path = self._path(record.id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
        tmp.replace(path)
        logger.debug("Wrote workbook record %s", path)

    def delete(self, workbook_id: str) -> None:
        path = self._path(workbook_id)
        if not path.exists():
            raise WorkbookNotFound(workbook_id)
        path.unlink()
        logger.debug("Removed workbook record %s", path)

    def list(self) -> List[WorkbookRecord]:
        records = [
            WorkbookRecord.from_dict(json.loads(p.read_text(encoding="utf-8")))
            for p in self.directory.glob("*.json")
        ]
        return sorted(records, key=lambda r: r.created_at, reverse=True)
