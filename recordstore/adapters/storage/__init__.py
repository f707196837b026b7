"""Document storage adapters."""

from recordstore.adapters.storage.base import AbstractDocumentStore, Record, RecordId
from recordstore.adapters.storage.json_file import JsonFileDocumentStore

__all__ = ["AbstractDocumentStore", "JsonFileDocumentStore", "Record", "RecordId"]
