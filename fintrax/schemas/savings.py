"""Pydantic schemas for savings goals."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from fintrax.schemas.common import Status, WritableStatus


class SavingsCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., ge=0)
    target_amount: float = Field(..., ge=0)
    rate: float = Field(0.0, ge=0, description="Annual interest rate, percent.")
    status: WritableStatus = int(Status.NOT_STARTED)


class SavingsUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    amount: float | None = Field(None, ge=0)
    target_amount: float | None = Field(None, ge=0)
    rate: float | None = Field(None, ge=0)
    status: WritableStatus | None = None


class SavingsResponse(BaseModel):
    saving_id: int
    name: str
    amount: float
    target_amount: float
    rate: float
    user_id: int
    status: int
    created_at: datetime
    updated_at: datetime
