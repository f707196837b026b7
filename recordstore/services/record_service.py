"""Record service: the engine façade used by the HTTP layer.

Every operation consults the rate limiter first, before any storage I/O or
schema validation happens, and then delegates to the document store.
"""

from __future__ import annotations

import hashlib
import logging

from recordstore.adapters.rate_limit.base import AbstractRateLimiter
from recordstore.adapters.storage.base import AbstractDocumentStore, Record, RecordId
from recordstore.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)


def _hash_client_id(client_id: str) -> str:
    """Hash the client identity for logging without exposing addresses."""
    return hashlib.sha256(client_id.encode()).hexdigest()[:16]


class RecordService:
    """Rate-limited CRUD operations over a document store.

    Attributes:
        store: Document store holding the records.
        limiter: Per-client rate limiter, or None when limiting is disabled.
    """

    def __init__(
        self,
        store: AbstractDocumentStore,
        limiter: AbstractRateLimiter | None = None,
    ) -> None:
        self.store = store
        self.limiter = limiter

    def check_rate_limit(self, client_id: str) -> None:
        """Consume one unit of ``client_id``'s quota.

        Raises:
            RateLimitAppError: If the client exhausted its quota.
        """
        if self.limiter is None:
            return

        try:
            result = self.limiter.consume(client_id)
        except RateLimitAppError as exc:
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "client_hash": _hash_client_id(client_id),
                    "limit": (exc.details or {}).get("limit"),
                    "retry_after_s": (exc.details or {}).get("retry_after"),
                },
            )
            raise

        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_hash": _hash_client_id(client_id),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )

    def list_records(self, client_id: str) -> list[Record]:
        self.check_rate_limit(client_id)
        return self.store.read()

    def create_record(self, client_id: str, record: Record) -> Record:
        self.check_rate_limit(client_id)
        return self.store.create(record)

    def update_record(self, client_id: str, record_id: RecordId, updates: Record) -> Record:
        self.check_rate_limit(client_id)
        return self.store.update(record_id, updates)

    def delete_record(self, client_id: str, record_id: RecordId) -> RecordId:
        self.check_rate_limit(client_id)
        return self.store.delete(record_id)
