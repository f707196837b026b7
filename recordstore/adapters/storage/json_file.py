"""JSON file document store.

The whole document is one JSON array on disk. Every mutation reads the full
document, applies the change in memory and rewrites the file.

Notes:
- The file is created on first use and its mode is forced to 0600.
- Writes go to a temporary file in the same directory which then replaces
  the document, so readers never observe a half-written file.
- Operations on one store instance are serialized with a lock, so
  concurrent requests in the same process cannot lose updates. Separate
  processes sharing a file still race (last write wins).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from recordstore.adapters.storage.base import AbstractDocumentStore, Record, RecordId
from recordstore.core.errors import NotFoundAppError, StorageAppError, ValidationAppError
from recordstore.services.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


def _is_record_id(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _matches(record: Record, record_id: RecordId) -> bool:
    value = record.get("id")
    return _is_record_id(value) and _is_record_id(record_id) and value == record_id


class JsonFileDocumentStore(AbstractDocumentStore):
    """Record store persisted as a single pretty-printed JSON array.

    Attributes:
        file_path: Location of the document on disk.
        validator: Schema validator applied to every created/updated record.
    """

    def __init__(self, file_path: str | Path, *, validator: SchemaValidator) -> None:
        """Open (and if needed create) the document file.

        Args:
            file_path: Path of the JSON document.
            validator: Validator for the records this store accepts.

        Raises:
            StorageAppError: If the file cannot be created or its mode set.
        """
        self.file_path = Path(file_path)
        self.validator = validator
        self._lock = threading.RLock()
        self._initialize()

    def _initialize(self) -> None:
        with self._lock:
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
                created = not self.file_path.exists()
                if created:
                    self._write_locked([])
                os.chmod(self.file_path, FILE_MODE)
            except OSError as exc:
                logger.error(
                    "store.init_failed",
                    extra={"file_path": str(self.file_path), "error_type": type(exc).__name__},
                )
                raise StorageAppError(
                    code="storage_init_failed",
                    message="Error initializing database file",
                ) from exc

        logger.info(
            "store.initialized",
            extra={"file_path": str(self.file_path), "created": created},
        )

    def read(self) -> list[Record]:
        """Read and parse the full document.

        Returns:
            Records in insertion order. A zero-byte file is an empty document.

        Raises:
            StorageAppError: If the file is unreadable or not a JSON array of objects.
        """
        with self._lock:
            return self._read_locked()

    def create(self, record: Record) -> Record:
        """Validate ``record`` and append it to the document.

        Args:
            record: Record to store; must carry an id not already stored.

        Returns:
            The record, unchanged.

        Raises:
            ValidationAppError: If validation fails or the id already exists.
            StorageAppError: If the document cannot be read or written.
        """
        self.validator.validate(record)

        with self._lock:
            records = self._read_locked()
            record_id = record["id"]
            if any(_matches(existing, record_id) for existing in records):
                raise ValidationAppError(
                    code="duplicate_id",
                    message=f"Validation Error: record with ID {record_id} already exists",
                    details={"record_id": record_id},
                )
            records.append(record)
            self._write_locked(records)

        logger.info(
            "store.record_created",
            extra={"record_id": record_id, "record_count": len(records)},
        )
        return record

    def update(self, record_id: RecordId, updates: Record) -> Record:
        """Merge ``updates`` into the stored record and persist it in place.

        The merged record (stored fields overwritten by ``updates``) is what
        gets validated, so a partial update cannot leave an invalid record.

        Args:
            record_id: Id of the record to update.
            updates: Fields to overwrite.

        Returns:
            The merged record.

        Raises:
            NotFoundAppError: If no record has ``record_id``.
            ValidationAppError: If the merged record is invalid or its new id
                belongs to another record.
            StorageAppError: If the document cannot be read or written.
        """
        if not isinstance(updates, dict):
            raise ValidationAppError(
                code="invalid_record",
                message="Validation Error: update must be a JSON object",
            )

        with self._lock:
            records = self._read_locked()
            index = next(
                (i for i, existing in enumerate(records) if _matches(existing, record_id)),
                None,
            )
            if index is None:
                raise NotFoundAppError(
                    code="record_not_found",
                    message=f"Record with ID {record_id} not found",
                    details={"record_id": record_id},
                )

            merged = {**records[index], **updates}
            self.validator.validate(merged)

            new_id = merged["id"]
            if new_id != record_id and any(
                _matches(existing, new_id)
                for i, existing in enumerate(records)
                if i != index
            ):
                raise ValidationAppError(
                    code="duplicate_id",
                    message=f"Validation Error: record with ID {new_id} already exists",
                    details={"record_id": new_id},
                )

            records[index] = merged
            self._write_locked(records)

        logger.info(
            "store.record_updated",
            extra={"record_id": record_id, "updated_fields": sorted(updates)},
        )
        return merged

    def delete(self, record_id: RecordId) -> RecordId:
        """Remove every record whose id equals ``record_id``.

        Args:
            record_id: Id of the record(s) to remove.

        Returns:
            The id that was deleted.

        Raises:
            NotFoundAppError: If no record has ``record_id``.
            StorageAppError: If the document cannot be read or written.
        """
        with self._lock:
            records = self._read_locked()
            remaining = [r for r in records if not _matches(r, record_id)]
            if len(remaining) == len(records):
                raise NotFoundAppError(
                    code="record_not_found",
                    message=f"Record with ID {record_id} not found",
                    details={"record_id": record_id},
                )
            self._write_locked(remaining)

        logger.info(
            "store.record_deleted",
            extra={"record_id": record_id, "removed": len(records) - len(remaining)},
        )
        return record_id

    def write(self, records: list[Record]) -> None:
        """Replace the whole document with ``records``."""
        with self._lock:
            self._write_locked(records)

    def _read_locked(self) -> list[Record]:
        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error(
                "store.read_failed",
                extra={"reason": "io_error", "error_type": type(exc).__name__},
            )
            raise StorageAppError(
                code="storage_read_failed",
                message="Error reading database file",
            ) from exc

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error(
                "store.read_failed",
                extra={"reason": "invalid_json", "line": exc.lineno, "column": exc.colno},
            )
            raise StorageAppError(
                code="storage_corrupted",
                message="Error reading database file: content is not valid JSON",
            ) from exc

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            logger.error("store.read_failed", extra={"reason": "unexpected_structure"})
            raise StorageAppError(
                code="storage_corrupted",
                message="Error reading database file: expected a JSON array of records",
            )

        return data

    def _write_locked(self, records: list[Record]) -> None:
        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise ValidationAppError(
                code="invalid_record",
                message="Validation Error: record contains values that cannot be stored as JSON",
            ) from exc

        # mkstemp creates the file with mode 0600
        fd, tmp_name = tempfile.mkstemp(
            dir=self.file_path.parent,
            prefix=f".{self.file_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, FILE_MODE)
            os.replace(tmp_name, self.file_path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            logger.error(
                "store.write_failed",
                extra={"error_type": type(exc).__name__, "record_count": len(records)},
            )
            raise StorageAppError(
                code="storage_write_failed",
                message="Error writing database file",
            ) from exc
