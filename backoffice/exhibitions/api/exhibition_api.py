from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.exhibitions.dtos import AboutExhibitionInput, AboutExhibitionSavedDTO
from backoffice.exhibitions.services.exhibition_service import ExhibitionService

router = APIRouter(
    prefix="/api/exhibitions",
    tags=["exhibitions"],
)


@router.get("/about")
def get_about_exhibition(engine: Engine = Depends(get_engine)) -> Optional[Dict[str, Any]]:
    try:
        return ExhibitionService(engine=engine).get_about()
    except BackofficeError as e:
        raise http_error(e)


@router.post("/about", response_model=AboutExhibitionSavedDTO)
def save_about_exhibition(
    payload: AboutExhibitionInput,
    engine: Engine = Depends(get_engine),
) -> AboutExhibitionSavedDTO:
    """Create the page, or update the existing one (questions replaced wholesale)."""
    try:
        return ExhibitionService(engine=engine).save_about(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.delete("/about/{page_id}")
def delete_about_exhibition(page_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        banner = ExhibitionService(engine=engine).delete_about(page_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "id": page_id, "released_image": banner}
