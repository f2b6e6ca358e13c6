from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import case, delete, insert, select
from sqlalchemy.engine import Engine

from backoffice.common.errors import NotFound
from backoffice.composite.update_builder import UpdateBuilder
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection, transaction

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = tuple(
    c.name
    for c in tables.tour_departures.columns
    if c.name not in ("departure_id", "tour_id", "created_at")
)


class TourDepartureRepository:
    """
    tour_departures rows.

    insert_many() writes a whole batch inside one transaction: either every
    departure of the request is stored or none is.
    """

    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self._update = UpdateBuilder(
            tables.tour_departures, key="departure_id", allowed=UPDATABLE_COLUMNS
        )

    def insert_many(self, tour_id: int, rows: Sequence[Mapping[str, Any]]) -> List[int]:
        t = tables.tour_departures
        ids: List[int] = []
        with transaction(self._engine) as conn:
            for row in rows:
                result = conn.execute(insert(t).values(tour_id=tour_id, **row))
                ids.append(int(result.inserted_primary_key[0]))

        logger.info(
            "tour %s: %s departure(s) inserted",
            tour_id,
            len(ids),
            extra={"entity": "tour_departure", "parent_id": tour_id},
        )
        return ids

    def list_for_tour(self, tour_id: int) -> List[Dict[str, Any]]:
        """Group tours by start_date, then everything by departure_date."""
        t = tables.tour_departures
        stmt = (
            select(t, (t.c.total_seats - t.c.booked_seats).label("available_seats"))
            .where(t.c.tour_id == tour_id)
            .order_by(
                case((t.c.tour_type == "Group", t.c.start_date), else_=None),
                t.c.departure_date,
                t.c.departure_id,
            )
        )
        with read_connection(self._engine) as conn:
            return [dict(r) for r in conn.execute(stmt).mappings().all()]

    def update(self, departure_id: int, fields: Mapping[str, Any]) -> None:
        with transaction(self._engine) as conn:
            result = conn.execute(self._update.build(departure_id, fields))
            if not result.rowcount:
                raise NotFound(f"tour departure {departure_id} not found")

    def delete(self, departure_id: int) -> None:
        t = tables.tour_departures
        with transaction(self._engine) as conn:
            result = conn.execute(delete(t).where(t.c.departure_id == departure_id))
            if not result.rowcount:
                raise NotFound(f"tour departure {departure_id} not found")
