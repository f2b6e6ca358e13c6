from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.engine import Engine

from backoffice.integrations.payments.flight_transactions.dtos import (
    FlightTransactionDTO,
    SaveFlightTransactionInput,
    SaveFlightTransactionResult,
)
from backoffice.integrations.payments.flight_transactions.repository.flight_transaction_repo import (
    FlightTransactionRepository,
)

logger = logging.getLogger(__name__)


class FlightTransactionService:
    """
    Online flight booking payments reported by the booking frontend after the
    gateway redirect. Retries with the same order_id update the existing row
    until it reaches Success or Failed; after that they only re-report it.
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[FlightTransactionRepository] = None,
    ) -> None:
        self._repo = repo or FlightTransactionRepository(engine=engine)

    def save_transaction(self, payload: SaveFlightTransactionInput) -> SaveFlightTransactionResult:
        transaction_id, created, stored = self._repo.upsert(payload.model_dump())
        if stored != payload.payment_status:
            logger.warning(
                "flight transaction %s order_id=%s already %s; ignored %s",
                transaction_id,
                payload.order_id,
                stored,
                payload.payment_status,
                extra={"order_id": payload.order_id, "parent_id": payload.booking_id},
            )
        logger.info(
            "flight transaction %s order_id=%s status=%s (%s)",
            transaction_id,
            payload.order_id,
            stored,
            "inserted" if created else "updated",
            extra={"order_id": payload.order_id, "parent_id": payload.booking_id},
        )
        return SaveFlightTransactionResult(
            transaction_id=transaction_id, created=created, payment_status=stored
        )

    def list_transactions(self) -> List[FlightTransactionDTO]:
        return [FlightTransactionDTO(**r) for r in self._repo.list_all()]

    def get_transaction(self, transaction_id: int) -> FlightTransactionDTO:
        return FlightTransactionDTO(**self._repo.get(transaction_id))

    def update_status(self, transaction_id: int, status: str) -> FlightTransactionDTO:
        self._repo.update_status(transaction_id, status)
        return self.get_transaction(transaction_id)
