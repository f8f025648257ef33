"""Savings goal endpoints: general rate limit, then bearer authentication."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fintrax.api.deps import get_savings_service
from fintrax.core.rate_limit import GENERAL, rate_limited_route
from fintrax.core.responses import respond
from fintrax.core.security import CurrentUserId
from fintrax.schemas.savings import SavingsCreate, SavingsUpdate
from fintrax.services.record_service import RecordService

router = APIRouter(prefix="/savings", tags=["Savings"], route_class=rate_limited_route(GENERAL))

Savings = Annotated[RecordService, Depends(get_savings_service)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_savings(body: SavingsCreate, user_id: CurrentUserId, savings: Savings) -> JSONResponse:
    return respond(status.HTTP_201_CREATED, "Savings created successfully", savings.create(user_id, body))


@router.get("")
def list_savings(user_id: CurrentUserId, savings: Savings) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Savings fetched successfully", savings.list(user_id))


@router.get("/{saving_id}")
def get_savings(saving_id: int, user_id: CurrentUserId, savings: Savings) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Savings fetched successfully", savings.get(user_id, saving_id))


@router.patch("/{saving_id}")
def update_savings(saving_id: int, body: SavingsUpdate, user_id: CurrentUserId, savings: Savings) -> JSONResponse:
    updated = savings.update(user_id, saving_id, body)
    return respond(status.HTTP_200_OK, "Savings updated successfully", updated)


@router.delete("/{saving_id}")
def delete_savings(saving_id: int, user_id: CurrentUserId, savings: Savings) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Savings deleted successfully", savings.delete(user_id, saving_id))
