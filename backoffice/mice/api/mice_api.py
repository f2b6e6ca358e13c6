from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.mice.dtos import (
    MicePackageInput,
    MicePackageSavedDTO,
    QuestionPageInput,
    QuestionPageSavedDTO,
)
from backoffice.mice.services.mice_service import MiceService

router = APIRouter(
    prefix="/api/mice",
    tags=["mice"],
)


# ============================================================
# Main page
# ============================================================

@router.get("/main")
def get_mice_main(engine: Engine = Depends(get_engine)) -> Optional[Dict[str, Any]]:
    """Latest main page with its questions, or null before the first save."""
    try:
        return MiceService(engine=engine).get_main()
    except BackofficeError as e:
        raise http_error(e)


@router.post("/main", response_model=QuestionPageSavedDTO)
def save_mice_main(
    payload: QuestionPageInput,
    engine: Engine = Depends(get_engine),
) -> QuestionPageSavedDTO:
    try:
        return MiceService(engine=engine).save_main(payload)
    except BackofficeError as e:
        raise http_error(e)


# ============================================================
# Packages
# ============================================================

@router.get("/packages")
def list_mice_packages(engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
    try:
        return MiceService(engine=engine).list_packages()
    except BackofficeError as e:
        raise http_error(e)


@router.get("/packages/{package_id}")
def get_mice_package(package_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        return MiceService(engine=engine).get_package(package_id)
    except BackofficeError as e:
        raise http_error(e)


@router.post("/packages", response_model=MicePackageSavedDTO)
def save_mice_package(
    payload: MicePackageInput,
    engine: Engine = Depends(get_engine),
) -> MicePackageSavedDTO:
    """Create (id omitted, images required) or edit (id set, images appended)."""
    try:
        return MiceService(engine=engine).save_package(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.delete("/packages/{package_id}")
def delete_mice_package(package_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        released = MiceService(engine=engine).delete_package(package_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "id": package_id, "released_images": released}
