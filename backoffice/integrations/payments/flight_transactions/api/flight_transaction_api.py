from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.integrations.payments.flight_transactions.dtos import (
    FlightTransactionDTO,
    FlightTransactionStatusInput,
    SaveFlightTransactionInput,
    SaveFlightTransactionResult,
)
from backoffice.integrations.payments.flight_transactions.services.flight_transaction_service import (
    FlightTransactionService,
)

router = APIRouter(tags=["flight_transactions"])


@router.post(
    "/api/flight-bookings/save-transaction",
    response_model=SaveFlightTransactionResult,
)
def save_flight_transaction(
    payload: SaveFlightTransactionInput,
    engine: Engine = Depends(get_engine),
) -> SaveFlightTransactionResult:
    """Upsert by order_id; a Success / Failed result also settles the flight booking."""
    try:
        return FlightTransactionService(engine=engine).save_transaction(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.get("/api/flight-transactions", response_model=List[FlightTransactionDTO])
def list_flight_transactions(
    engine: Engine = Depends(get_engine),
) -> List[FlightTransactionDTO]:
    try:
        return FlightTransactionService(engine=engine).list_transactions()
    except BackofficeError as e:
        raise http_error(e)


@router.get("/api/flight-transactions/{transaction_id}", response_model=FlightTransactionDTO)
def get_flight_transaction(
    transaction_id: int,
    engine: Engine = Depends(get_engine),
) -> FlightTransactionDTO:
    try:
        return FlightTransactionService(engine=engine).get_transaction(transaction_id)
    except BackofficeError as e:
        raise http_error(e)


@router.put(
    "/api/flight-transactions/{transaction_id}/status",
    response_model=FlightTransactionDTO,
)
def update_flight_transaction_status(
    transaction_id: int,
    payload: FlightTransactionStatusInput,
    engine: Engine = Depends(get_engine),
) -> FlightTransactionDTO:
    try:
        return FlightTransactionService(engine=engine).update_status(
            transaction_id, payload.status
        )
    except BackofficeError as e:
        raise http_error(e)
