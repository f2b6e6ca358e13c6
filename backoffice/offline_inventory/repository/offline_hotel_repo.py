from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection

OFFLINE_HOTEL_SPEC = CompositeSpec(
    entity="offline_hotel",
    parent=tables.offline_hotels,
    key="id",
    columns=(
        "country",
        "city",
        "location",
        "property_name",
        "check_in_date",
        "check_out_date",
        "rooms",
        "adults",
        "children",
        "pets",
        "children_ages",
        "hotel_name",
        "hotel_location",
        "star_rating",
        "main_image",
        "additional_images",
        "rating",
        "total_ratings",
        "price",
        "taxes",
        "amenities",
        "status",
        "free_stay_for_kids",
        "limited_time_sale",
        "sale_price",
        "original_price",
        "login_to_book",
        "pay_later",
        "overview_description",
        "hotel_facilities_description",
        "airport_transfers_description",
        "meal_plan_description",
        "taxes_description",
    ),
    required=("country", "city", "check_in_date", "check_out_date", "hotel_name", "price"),
    children=(
        ChildSpec(
            name="price_ranges",
            table=tables.offline_hotel_price_ranges,
            parent_key="hotel_id",
            columns=("min_price", "max_price", "range_label", "property_count", "is_selected"),
        ),
        ChildSpec(
            name="star_categories",
            table=tables.offline_hotel_star_categories,
            parent_key="hotel_id",
            columns=("stars", "property_count", "is_selected"),
            required=("stars",),
        ),
        ChildSpec(
            name="budget",
            table=tables.offline_hotel_budget,
            parent_key="hotel_id",
            columns=("min_budget", "max_budget"),
        ),
        ChildSpec(
            name="search_localities",
            table=tables.offline_hotel_search_localities,
            parent_key="hotel_id",
            columns=("locality_name",),
            required=("locality_name",),
        ),
    ),
)


class OfflineHotelRepository:
    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.writer = CompositeWriter(OFFLINE_HOTEL_SPEC, engine=self._engine)

    def list_all(self) -> List[Dict[str, Any]]:
        t = tables.offline_hotels
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                select(t).order_by(t.c.created_at.desc(), t.c.id.desc())
            ).mappings().all()
        return [dict(r) for r in rows]

    def fetch_image_columns(self, hotel_ids: Sequence[int]) -> List[Dict[str, Any]]:
        t = tables.offline_hotels
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                select(t.c.id, t.c.main_image, t.c.additional_images).where(
                    t.c.id.in_(list(hotel_ids))
                )
            ).mappings().all()
        return [dict(r) for r in rows]
