from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Engine

from backoffice.common.errors import ValidationError
from backoffice.composite.composite_writer import CompositePayload
from backoffice.stays.dtos import StayListingCreatedDTO, StayListingInput
from backoffice.stays.repository.stay_listing_repo import (
    BUNGALOW_LISTING,
    WEEKEND_GATEWAY_LISTING,
    StayListingRepository,
)

logger = logging.getLogger(__name__)


def _image_rows(image_urls: List[str]) -> List[Dict[str, Any]]:
    return [
        {"image_url": url, "is_main": i == 0, "sort_order": i}
        for i, url in enumerate(image_urls)
    ]


class StayListingService:
    """
    Bungalow / weekend gateway listings (admin).

    Responsibilities:
      - listing row + its images in one transaction
      - PUT: parent fields, plus a replace-set of images when images are sent
      - soft delete (status 0), image add / main / delete

    Image files are never touched here; images are the stored paths.
    """

    def __init__(self, repo: StayListingRepository) -> None:
        self._repo = repo
        self._kind = repo.kind

    @classmethod
    def bungalows(cls, *, engine: Optional[Engine] = None) -> "StayListingService":
        return cls(StayListingRepository(BUNGALOW_LISTING, engine=engine))

    @classmethod
    def weekend_gateways(cls, *, engine: Optional[Engine] = None) -> "StayListingService":
        return cls(StayListingRepository(WEEKEND_GATEWAY_LISTING, engine=engine))

    def next_code(self) -> Dict[str, str]:
        return {"next_code": self._repo.next_code(), "prefix": self._kind.code_prefix}

    def create_listing(self, payload: StayListingInput) -> StayListingCreatedDTO:
        parent = payload.model_dump(exclude={"code", "images"})
        code = (payload.code or "").strip() or self._repo.next_code()
        parent[self._kind.code_column] = code

        images = _image_rows(payload.images or [])
        result = self._repo.writer.create(
            CompositePayload(parent=parent, children={"images": images})
        )
        return StayListingCreatedDTO(
            id=result.parent_id, code=code, images=result.child_counts["images"]
        )

    def update_listing(self, listing_id: int, payload: StayListingInput) -> Dict[str, Any]:
        parent = payload.model_dump(exclude={"code", "images"})
        if payload.images is None:
            self._repo.writer.append(listing_id, CompositePayload(parent=parent))
        else:
            self._repo.writer.replace(
                listing_id,
                CompositePayload(parent=parent, children={"images": _image_rows(payload.images)}),
            )
        return self.get_listing(listing_id)

    def get_listing(self, listing_id: int) -> Dict[str, Any]:
        data = self._repo.writer.fetch(listing_id)
        images = sorted(data.pop("images"), key=lambda r: (not r["is_main"], r["sort_order"]))
        return {self._kind.spec.entity: data, "images": images}

    def list_listings(self) -> List[Dict[str, Any]]:
        return self._repo.list_listed()

    def unlist_listing(self, listing_id: int) -> None:
        self._repo.unlist(listing_id)
        logger.info(
            "%s %s unlisted",
            self._kind.spec.entity,
            listing_id,
            extra={"entity": self._kind.spec.entity, "parent_id": listing_id},
        )

    def add_images(self, listing_id: int, image_urls: List[str]) -> List[Dict[str, Any]]:
        urls = [u.strip() for u in image_urls]
        if not all(urls):
            raise ValidationError("image paths cannot be blank")
        return self._repo.add_images(listing_id, urls)

    def set_main_image(self, image_id: int) -> Dict[str, Any]:
        return self.get_listing(self._repo.set_main_image(image_id))

    def delete_image(self, image_id: int) -> str:
        return self._repo.delete_image(image_id)
