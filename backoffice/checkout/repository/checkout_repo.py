from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine

from backoffice.common.errors import NotFound, ValidationError
from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.composite.update_builder import UpdateBuilder
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection, transaction

CHECKOUT_SPEC = CompositeSpec(
    entity="checkout",
    parent=tables.checkouts,
    key="checkout_id",
    columns=(
        "tour_id",
        "tour_code",
        "tour_title",
        "tour_duration",
        "tour_locations",
        "tour_image_url",
        "total_tour_cost",
        "advance_percentage",
        "advance_amount",
        "emi_price",
        "first_name",
        "last_name",
        "email",
        "phone",
        "address",
        "city",
        "state",
        "pincode",
        "country",
        "payment_method",
        "source_page",
        "terms_accepted",
        "notes",
    ),
    required=("tour_id", "total_tour_cost", "advance_amount"),
    children=(
        ChildSpec(
            name="payments",
            table=tables.payments,
            parent_key="checkout_id",
            columns=("amount", "currency", "payment_gateway", "environment", "status"),
            required=("amount",),
        ),
    ),
)

COMPLETED = "completed"

CONTACT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "pincode",
    "country",
    "notes",
)


class CheckoutRepository:
    """
    Responsibilities:
      - checkout + initial payment row (CompositeWriter)
      - allowlisted partial updates (contact fields / payment_status)
      - lookups by id and by tour
    """

    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.writer = CompositeWriter(CHECKOUT_SPEC, engine=self._engine)
        self._contact_update = UpdateBuilder(
            tables.checkouts, key="checkout_id", allowed=CONTACT_FIELDS
        )
        self._status_update = UpdateBuilder(
            tables.checkouts, key="checkout_id", allowed=("payment_status",)
        )

    def update_contact(self, checkout_id: int, fields: Mapping[str, Any]) -> None:
        self._apply(self._contact_update, checkout_id, fields)

    def update_status(self, checkout_id: int, payment_status: str) -> None:
        """
        Manual payment_status override.

        completed needs a Success payment row for the checkout, and a completed
        checkout keeps that status. Both are checked in the same transaction
        as the write.
        """
        t = tables.checkouts
        p = tables.payments
        stmt = self._status_update.build(checkout_id, {"payment_status": payment_status})
        if payment_status != COMPLETED:
            stmt = stmt.where(t.c.payment_status != COMPLETED)

        with transaction(self._engine) as conn:
            current = conn.execute(
                select(t.c.payment_status).where(t.c.checkout_id == checkout_id)
            ).scalar_one_or_none()
            if current is None:
                raise NotFound(f"checkout {checkout_id} not found")

            if payment_status == COMPLETED:
                settled = conn.execute(
                    select(p.c.payment_id)
                    .where(p.c.checkout_id == checkout_id, p.c.status == "Success")
                    .limit(1)
                ).first()
                if settled is None:
                    raise ValidationError(
                        f"checkout {checkout_id} has no Success payment; cannot mark completed"
                    )

            if not conn.execute(stmt).rowcount:
                raise ValidationError(
                    f"checkout {checkout_id} is completed; cannot change to {payment_status}"
                )

    def list_by_tour(self, tour_id: int) -> List[Dict[str, Any]]:
        t = tables.checkouts
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                select(t)
                .where(t.c.tour_id == tour_id)
                .order_by(t.c.created_at.desc(), t.c.checkout_id.desc())
            ).mappings().all()
        return [dict(r) for r in rows]

    # --------------------------------------------------------
    # Internal
    # --------------------------------------------------------

    def _apply(self, builder: UpdateBuilder, checkout_id: int, fields: Mapping[str, Any]) -> None:
        stmt = builder.build(checkout_id, fields)
        with transaction(self._engine) as conn:
            if not conn.execute(stmt).rowcount:
                raise NotFound(f"checkout {checkout_id} not found")
