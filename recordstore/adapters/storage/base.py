"""Document store interfaces.

The record service depends on this abstraction so the JSON file backend can
be replaced without touching the service or API layers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Record = dict[str, Any]
RecordId = int | float


class AbstractDocumentStore(ABC):
    """Interface for whole-document record stores."""

    @abstractmethod
    def read(self) -> list[Record]:
        """Return every stored record in insertion order.

        Raises:
            StorageAppError: If the document cannot be read or parsed.
        """
        raise NotImplementedError

    @abstractmethod
    def create(self, record: Record) -> Record:
        """Validate and append a record.

        Raises:
            ValidationAppError: If the record fails the schema or its id is taken.
            StorageAppError: If the document cannot be read or written.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, record_id: RecordId, updates: Record) -> Record:
        """Merge ``updates`` into the record with ``record_id``.

        Raises:
            NotFoundAppError: If no record has that id.
            ValidationAppError: If the merged record fails the schema.
            StorageAppError: If the document cannot be read or written.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, record_id: RecordId) -> RecordId:
        """Remove every record with ``record_id`` and return the id.

        Raises:
            NotFoundAppError: If no record has that id.
            StorageAppError: If the document cannot be read or written.
        """
        raise NotImplementedError
