from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from backoffice.common.errors import NotFound, ValidationError
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection, transaction

TERMINAL_STATUSES = ("Success", "Failed")

# terminal transaction payment_status -> (flight_bookings.payment_status, booking_status)
BOOKING_OUTCOME = {
    "Success": ("Completed", "Confirmed"),
    "Failed": ("Failed", "Failed"),
}


class FlightTransactionRepository:
    """
    flight_booking_transactions persistence.

    Responsibilities:
      - upsert by order_id; a Success / Failed row is never rewritten
      - settle the owning flight booking when a row reaches Success / Failed
      - list / detail with the owning flight booking joined
      - manual status override (same terminal rule)
    """

    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()

    def upsert(self, row: Dict[str, Any]) -> Tuple[int, bool, str]:
        """
        Returns (transaction_id, created, stored payment_status).

        Existing non-terminal order_id: payment_status / payment_id /
        payment_amount are overwritten. Existing terminal order_id: nothing
        changes and the stored status is reported back.
        New order_id: inserted.
        Either way, when the written status is terminal and the row has a
        booking_id, the booking is settled in the same transaction.
        """
        t = tables.flight_booking_transactions
        with transaction(self._engine) as conn:
            existing = conn.execute(
                select(t.c.id, t.c.booking_id, t.c.payment_status).where(
                    t.c.order_id == row["order_id"]
                )
            ).first()

            if existing is not None:
                applied = conn.execute(
                    update(t)
                    .where(t.c.id == existing.id)
                    .where(t.c.payment_status.notin_(TERMINAL_STATUSES))
                    .values(
                        payment_status=row["payment_status"],
                        payment_id=row.get("payment_id"),
                        payment_amount=row["payment_amount"],
                        updated_at=func.now(),
                    )
                ).rowcount
                if not applied:
                    return int(existing.id), False, existing.payment_status
                self._settle_booking(conn, existing.booking_id, row["payment_status"])
                return int(existing.id), False, row["payment_status"]

            booking_id = row.get("booking_id")
            if booking_id is not None:
                b = tables.flight_bookings
                found = conn.execute(
                    select(b.c.booking_id).where(b.c.booking_id == booking_id)
                ).first()
                if found is None:
                    raise NotFound(f"flight booking {booking_id} not found")

            result = conn.execute(insert(t).values(**row))
            transaction_id = int(result.inserted_primary_key[0])
            self._settle_booking(conn, booking_id, row["payment_status"])

        return transaction_id, True, row["payment_status"]

    def list_all(self) -> List[Dict[str, Any]]:
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                self._joined_select().order_by(
                    tables.flight_booking_transactions.c.created_at.desc(),
                    tables.flight_booking_transactions.c.id.desc(),
                )
            ).mappings().all()
        return [dict(r) for r in rows]

    def get(self, transaction_id: int) -> Dict[str, Any]:
        t = tables.flight_booking_transactions
        with read_connection(self._engine) as conn:
            row = conn.execute(
                self._joined_select().where(t.c.id == transaction_id)
            ).mappings().first()
        if row is None:
            raise NotFound(f"flight transaction {transaction_id} not found")
        return dict(row)

    def update_status(self, transaction_id: int, status: str) -> None:
        """Setting a terminal row to its own status is a no-op; any other change is refused."""
        t = tables.flight_booking_transactions
        with transaction(self._engine) as conn:
            current = conn.execute(
                select(t.c.booking_id, t.c.payment_status).where(t.c.id == transaction_id)
            ).first()
            if current is None:
                raise NotFound(f"flight transaction {transaction_id} not found")
            if current.payment_status == status:
                return

            applied = conn.execute(
                update(t)
                .where(t.c.id == transaction_id)
                .where(t.c.payment_status.notin_(TERMINAL_STATUSES))
                .values(payment_status=status, updated_at=func.now())
            ).rowcount
            if not applied:
                raise ValidationError(
                    f"flight transaction {transaction_id} is already "
                    f"{current.payment_status}; cannot change to {status}"
                )
            self._settle_booking(conn, current.booking_id, status)

    @staticmethod
    def _settle_booking(conn: Connection, booking_id: Optional[int], status: str) -> None:
        outcome = BOOKING_OUTCOME.get(status)
        if booking_id is None or outcome is None:
            return
        b = tables.flight_bookings
        payment_status, booking_status = outcome
        conn.execute(
            update(b)
            .where(b.c.booking_id == booking_id)
            .values(
                payment_status=payment_status,
                booking_status=booking_status,
                updated_at=func.now(),
            )
        )

    @staticmethod
    def _joined_select():
        t = tables.flight_booking_transactions
        b = tables.flight_bookings
        return select(t, b.c.pnr, b.c.booking_status).select_from(
            t.outerjoin(b, t.c.booking_id == b.c.booking_id)
        )
