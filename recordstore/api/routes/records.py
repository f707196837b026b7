from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Request, status

from recordstore.adapters.storage.base import Record, RecordId
from recordstore.core.rate_limit import get_client_id
from recordstore.schemas.records import DeleteRecordResponse
from recordstore.services.record_service import RecordService

router = APIRouter(prefix="/api/records", tags=["Records"])


def get_record_service(request: Request) -> RecordService:
    """Return the record service built by the app factory."""
    return request.app.state.record_service


def _normalize_id(value: float) -> RecordId:
    """Render integral path ids as ints so responses echo ``1``, not ``1.0``."""
    if value.is_integer():
        return int(value)
    return value


ServiceDep = Annotated[RecordService, Depends(get_record_service)]
ClientDep = Annotated[str, Depends(get_client_id)]
RecordIdPath = Annotated[
    float, Path(description="Numeric id of the record.", allow_inf_nan=False)
]


@router.get("", response_model=list[dict[str, Any]])
def list_records(service: ServiceDep, client_id: ClientDep) -> list[Record]:
    """Return every stored record in insertion order."""
    return service.list_records(client_id)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=dict[str, Any])
def create_record(
    record: Annotated[dict[str, Any], Body(description="Record to store.")],
    service: ServiceDep,
    client_id: ClientDep,
) -> Record:
    """Validate and store a new record.

    Returns:
        The stored record.
    """
    return service.create_record(client_id, record)


@router.put("/{record_id}", response_model=dict[str, Any])
def update_record(
    record_id: RecordIdPath,
    updates: Annotated[dict[str, Any], Body(description="Fields to overwrite.")],
    service: ServiceDep,
    client_id: ClientDep,
) -> Record:
    """Merge the given fields into an existing record.

    Returns:
        The merged record.
    """
    return service.update_record(client_id, _normalize_id(record_id), updates)


@router.delete("/{record_id}", response_model=DeleteRecordResponse)
def delete_record(
    record_id: RecordIdPath,
    service: ServiceDep,
    client_id: ClientDep,
) -> DeleteRecordResponse:
    deleted_id = service.delete_record(client_id, _normalize_id(record_id))
    return DeleteRecordResponse(
        message=f"Record with ID {deleted_id} deleted",
        id=deleted_id,
    )
