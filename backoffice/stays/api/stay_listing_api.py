from __future__ import annotations

from typing import Any, Callable, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.stays.dtos import StayImagesInput, StayListingCreatedDTO, StayListingInput
from backoffice.stays.services.stay_listing_service import StayListingService

ServiceFactory = Callable[..., StayListingService]


def build_listing_router(prefix: str, tag: str, service_for: ServiceFactory) -> APIRouter:
    """
    Admin routes of one listing kind.

    Listing ids use the int path convertor so that sibling routers under the
    same prefix (e.g. /bookings) are never shadowed.
    """
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("/next-code")
    def next_listing_code(engine: Engine = Depends(get_engine)) -> Dict[str, str]:
        try:
            return service_for(engine=engine).next_code()
        except BackofficeError as e:
            raise http_error(e)

    @router.get("")
    def list_listings(engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
        try:
            return service_for(engine=engine).list_listings()
        except BackofficeError as e:
            raise http_error(e)

    @router.post(
        "",
        response_model=StayListingCreatedDTO,
        status_code=status.HTTP_201_CREATED,
    )
    def create_listing(
        payload: StayListingInput,
        engine: Engine = Depends(get_engine),
    ) -> StayListingCreatedDTO:
        try:
            return service_for(engine=engine).create_listing(payload)
        except BackofficeError as e:
            raise http_error(e)

    @router.get("/{listing_id:int}")
    def get_listing(listing_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
        try:
            return service_for(engine=engine).get_listing(listing_id)
        except BackofficeError as e:
            raise http_error(e)

    @router.put("/{listing_id:int}")
    def update_listing(
        listing_id: int,
        payload: StayListingInput,
        engine: Engine = Depends(get_engine),
    ) -> Dict[str, Any]:
        """Full replacement of the listing fields; images are replaced only when sent."""
        try:
            return service_for(engine=engine).update_listing(listing_id, payload)
        except BackofficeError as e:
            raise http_error(e)

    @router.delete("/{listing_id:int}")
    def unlist_listing(listing_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
        """Soft delete: the row stays, status becomes 0."""
        try:
            service_for(engine=engine).unlist_listing(listing_id)
        except BackofficeError as e:
            raise http_error(e)
        return {"ok": True, "id": listing_id}

    @router.post("/{listing_id:int}/images")
    def add_listing_images(
        listing_id: int,
        payload: StayImagesInput,
        engine: Engine = Depends(get_engine),
    ) -> Dict[str, Any]:
        try:
            rows = service_for(engine=engine).add_images(listing_id, payload.images)
        except BackofficeError as e:
            raise http_error(e)
        return {"ok": True, "images": rows}

    @router.put("/images/{image_id:int}/main")
    def set_main_listing_image(
        image_id: int,
        engine: Engine = Depends(get_engine),
    ) -> Dict[str, Any]:
        try:
            return service_for(engine=engine).set_main_image(image_id)
        except BackofficeError as e:
            raise http_error(e)

    @router.delete("/images/{image_id:int}")
    def delete_listing_image(
        image_id: int,
        engine: Engine = Depends(get_engine),
    ) -> Dict[str, Any]:
        try:
            image_url = service_for(engine=engine).delete_image(image_id)
        except BackofficeError as e:
            raise http_error(e)
        return {"ok": True, "image_id": image_id, "released_image": image_url}

    return router


bungalow_listing_router = build_listing_router(
    "/api/bungalows", "bungalows", StayListingService.bungalows
)
weekend_listing_router = build_listing_router(
    "/api/weekend-gateways", "weekend_gateways", StayListingService.weekend_gateways
)
