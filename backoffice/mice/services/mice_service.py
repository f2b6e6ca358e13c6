from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Engine

from backoffice.common.errors import ValidationError
from backoffice.composite.composite_writer import CompositePayload
from backoffice.composite.question_page import QuestionPage
from backoffice.mice.dtos import (
    MicePackageInput,
    MicePackageSavedDTO,
    QuestionPageInput,
    QuestionPageSavedDTO,
)
from backoffice.mice.repository.mice_repo import MICE_MAIN_SPEC, MicePackageRepository

logger = logging.getLogger(__name__)


class MiceService:
    """
    MICE admin content.

    Responsibilities:
      - main page: banner + Q&A replace-set (blank pairs are dropped)
      - packages: package row + images; an edit adds images to the stored set
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        packages: Optional[MicePackageRepository] = None,
    ) -> None:
        self._main = QuestionPage(MICE_MAIN_SPEC, engine=engine, skip_blank=True)
        self._packages = packages or MicePackageRepository(engine=engine)

    # --------------------------------------------------------
    # Main page
    # --------------------------------------------------------

    def get_main(self) -> Optional[Dict[str, Any]]:
        return self._main.latest()

    def save_main(self, payload: QuestionPageInput) -> QuestionPageSavedDTO:
        saved = self._main.save(
            payload.banner_image, [q.model_dump() for q in payload.questions]
        )
        return QuestionPageSavedDTO(id=saved.id, created=saved.created, questions=saved.questions)

    # --------------------------------------------------------
    # Packages
    # --------------------------------------------------------

    def list_packages(self) -> List[Dict[str, Any]]:
        return self._packages.list_with_images()

    def get_package(self, package_id: int) -> Dict[str, Any]:
        return self._packages.writer.fetch(package_id)

    def save_package(self, payload: MicePackageInput) -> MicePackageSavedDTO:
        parent = {"days": payload.days.strip(), "price": payload.price}
        images = [{"image_path": path} for path in payload.images]

        if payload.id is None:
            if not images:
                raise ValidationError("at least one image is required for a new package")
            result = self._packages.writer.create(
                CompositePayload(parent=parent, children={"images": images})
            )
            created = True
        else:
            result = self._packages.writer.append(
                payload.id, CompositePayload(parent=parent, children={"images": images})
            )
            created = False

        return MicePackageSavedDTO(
            id=result.parent_id,
            created=created,
            images_added=result.child_counts["images"],
        )

    def delete_package(self, package_id: int) -> List[str]:
        """Delete the package and its images; returns the released image paths."""
        released = [img["image_path"] for img in self.get_package(package_id)["images"]]
        self._packages.writer.delete(package_id)
        logger.info(
            "mice package %s deleted, %s image(s) released",
            package_id,
            len(released),
            extra={"entity": "mice_package", "parent_id": package_id},
        )
        return released
