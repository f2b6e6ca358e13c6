from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.engine import Engine

from backoffice.checkout.dtos import (
    CheckoutCreateDTO,
    CheckoutDTO,
    CheckoutStatusUpdateDTO,
)
from backoffice.checkout.services.checkout_service import CheckoutService
from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine

router = APIRouter(
    prefix="/api/checkout",
    tags=["checkout"],
)


@router.post("", response_model=CheckoutDTO, status_code=status.HTTP_201_CREATED)
def create_checkout(
    payload: CheckoutCreateDTO,
    engine: Engine = Depends(get_engine),
) -> CheckoutDTO:
    """Checkout + Pending payment row (amount = advance_amount) in one transaction."""
    try:
        return CheckoutService(engine=engine).create_checkout(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.get("/tour/{tour_id}")
def list_checkouts_by_tour(
    tour_id: int,
    engine: Engine = Depends(get_engine),
) -> List[Dict[str, Any]]:
    try:
        return CheckoutService(engine=engine).list_by_tour(tour_id)
    except BackofficeError as e:
        raise http_error(e)


@router.get("/{checkout_id}", response_model=CheckoutDTO)
def get_checkout(
    checkout_id: int,
    engine: Engine = Depends(get_engine),
) -> CheckoutDTO:
    try:
        return CheckoutService(engine=engine).get_checkout(checkout_id)
    except BackofficeError as e:
        raise http_error(e)


@router.patch("/{checkout_id}", response_model=CheckoutDTO)
def update_checkout_contact(
    checkout_id: int,
    payload: Dict[str, Any] = Body(...),
    engine: Engine = Depends(get_engine),
) -> CheckoutDTO:
    """
    Partial update of the contact block.

    Unknown or non-contact keys (amounts, payment_status, ...) -> 400.
    """
    try:
        return CheckoutService(engine=engine).update_contact(checkout_id, payload)
    except BackofficeError as e:
        raise http_error(e)


@router.put("/{checkout_id}/status", response_model=CheckoutDTO)
def update_checkout_status(
    checkout_id: int,
    payload: CheckoutStatusUpdateDTO,
    engine: Engine = Depends(get_engine),
) -> CheckoutDTO:
    try:
        return CheckoutService(engine=engine).update_status(checkout_id, payload.payment_status)
    except BackofficeError as e:
        raise http_error(e)
