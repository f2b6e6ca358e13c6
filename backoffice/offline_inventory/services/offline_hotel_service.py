from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import CompositePayload
from backoffice.offline_inventory.dtos import (
    BulkDeleteResultDTO,
    OfflineHotelInput,
    OfflineWriteResultDTO,
)
from backoffice.offline_inventory.repository.offline_hotel_repo import (
    OfflineHotelRepository,
)

logger = logging.getLogger(__name__)

_JSON_COLUMNS = ("children_ages", "additional_images")


def _decode_json_list(raw: Any) -> List[Any]:
    if not raw:
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("undecodable JSON column value: %r", raw)
        return []
    return value if isinstance(value, list) else []


def decode_hotel_row(row: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(row)
    for col in _JSON_COLUMNS:
        data[col] = _decode_json_list(data.get(col))
    return data


class OfflineHotelService:
    """
    Offline hotel listings.

    Responsibilities:
      - payload -> offline_hotels row + four filter tables
      - replace-set PUT, delete, bulk delete
      - JSON columns (children_ages / additional_images) encode / decode

    Image files are never touched here; mainImage / additionalImages are the
    paths already stored by the upload collaborator.
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[OfflineHotelRepository] = None,
    ) -> None:
        self._repo = repo or OfflineHotelRepository(engine=engine)

    # --------------------------------------------------------
    # Write
    # --------------------------------------------------------

    def create_hotel(self, payload: OfflineHotelInput) -> OfflineWriteResultDTO:
        result = self._repo.writer.create(self._to_composite(payload))
        return OfflineWriteResultDTO(id=result.parent_id, child_counts=result.child_counts)

    def replace_hotel(self, hotel_id: int, payload: OfflineHotelInput) -> OfflineWriteResultDTO:
        result = self._repo.writer.replace(hotel_id, self._to_composite(payload))
        return OfflineWriteResultDTO(id=result.parent_id, child_counts=result.child_counts)

    def delete_hotel(self, hotel_id: int) -> None:
        self._repo.writer.delete(hotel_id)

    def bulk_delete(self, hotel_ids: Sequence[int]) -> BulkDeleteResultDTO:
        ids = list(dict.fromkeys(hotel_ids))
        released: List[str] = []
        if ids:
            for row in self._repo.fetch_image_columns(ids):
                if row.get("main_image"):
                    released.append(row["main_image"])
                released.extend(_decode_json_list(row.get("additional_images")))

        deleted = self._repo.writer.delete_many(ids)
        return BulkDeleteResultDTO(deleted=deleted, released_images=released)

    # --------------------------------------------------------
    # Read
    # --------------------------------------------------------

    def get_hotel(self, hotel_id: int) -> Dict[str, Any]:
        data = decode_hotel_row(self._repo.writer.fetch(hotel_id))
        budget = data.pop("budget")
        data["filters"] = {
            "price_ranges": data.pop("price_ranges"),
            "star_categories": data.pop("star_categories"),
            "budget": budget[0] if budget else None,
            "search_localities": data.pop("search_localities"),
        }
        return data

    def list_hotels(self) -> List[Dict[str, Any]]:
        return [decode_hotel_row(r) for r in self._repo.list_all()]

    # --------------------------------------------------------
    # Internal
    # --------------------------------------------------------

    @staticmethod
    def _to_composite(payload: OfflineHotelInput) -> CompositePayload:
        search = payload.search_details
        hotel = payload.hotel_details
        desc = payload.descriptions
        filters = payload.filters

        parent: Dict[str, Any] = {
            "country": search.country,
            "city": search.city,
            "location": search.location,
            "property_name": search.property_name,
            "check_in_date": search.check_in_date,
            "check_out_date": search.check_out_date,
            "rooms": search.rooms,
            "adults": search.adults,
            "children": search.children,
            "pets": search.pets,
            "children_ages": json.dumps(payload.children_ages),
            "hotel_name": hotel.hotel_name,
            "hotel_location": hotel.location,
            "star_rating": hotel.star_rating,
            "main_image": hotel.main_image,
            "additional_images": json.dumps(hotel.additional_images),
            "rating": hotel.rating,
            "total_ratings": hotel.total_ratings,
            "price": hotel.price,
            "taxes": hotel.taxes,
            "amenities": hotel.amenities,
            "status": hotel.status or "Available",
            "free_stay_for_kids": hotel.free_stay_for_kids,
            "limited_time_sale": hotel.limited_time_sale,
            "sale_price": hotel.sale_price,
            "original_price": hotel.original_price,
            "login_to_book": hotel.login_to_book,
            "pay_later": hotel.pay_later,
            "overview_description": desc.overview,
            "hotel_facilities_description": desc.hotel_facilities,
            "airport_transfers_description": desc.airport_transfers,
            "meal_plan_description": desc.meal_plan,
            "taxes_description": desc.taxes_description,
        }

        children: Dict[str, List[Dict[str, Any]]] = {
            "price_ranges": [
                {
                    "min_price": r.min,
                    "max_price": r.max,
                    "range_label": r.range,
                    "property_count": r.count,
                    "is_selected": r.selected,
                }
                for r in filters.price_ranges
            ],
            "star_categories": [
                {
                    "stars": s.stars,
                    "property_count": s.count,
                    "is_selected": s.selected,
                }
                for s in filters.star_categories
            ],
            "budget": (
                [{"min_budget": filters.budget.min, "max_budget": filters.budget.max}]
                if filters.budget
                else []
            ),
            "search_localities": (
                [{"locality_name": filters.search_locality.strip()}]
                if filters.search_locality and filters.search_locality.strip()
                else []
            ),
        }
        return CompositePayload(parent=parent, children=children)
