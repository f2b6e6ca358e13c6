from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.engine import Engine

from backoffice.composite.question_page import QuestionPage
from backoffice.exhibitions.dtos import AboutExhibitionInput, AboutExhibitionSavedDTO
from backoffice.exhibitions.repository.exhibition_repo import about_exhibition_page

logger = logging.getLogger(__name__)


class ExhibitionService:
    """About-exhibition page: banner + ordered Q&A, saved as one replace-set."""

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        page: Optional[QuestionPage] = None,
    ) -> None:
        self._page = page or about_exhibition_page(engine=engine)

    def get_about(self) -> Optional[Dict[str, Any]]:
        return self._page.latest()

    def save_about(self, payload: AboutExhibitionInput) -> AboutExhibitionSavedDTO:
        saved = self._page.save(
            payload.banner_image, [q.model_dump() for q in payload.questions]
        )
        return AboutExhibitionSavedDTO(
            id=saved.id, created=saved.created, questions=saved.questions
        )

    def delete_about(self, page_id: int) -> str:
        banner = self._page.delete(page_id)
        logger.info(
            "about exhibition %s deleted",
            page_id,
            extra={"entity": "about_exhibition", "parent_id": page_id},
        )
        return banner
