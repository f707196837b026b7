"""Pydantic schemas for record API responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DeleteRecordResponse(BaseModel):
    """Confirmation returned after a record is deleted."""

    message: str = Field(..., description="Human-readable confirmation.")
    id: int | float = Field(..., description="Id of the deleted record.")
