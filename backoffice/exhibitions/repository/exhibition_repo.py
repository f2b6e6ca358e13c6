from __future__ import annotations

from typing import Optional

from sqlalchemy.engine import Engine

from backoffice.composite.question_page import QuestionPage, question_page_spec
from backoffice.db import tables

ABOUT_EXHIBITION_SPEC = question_page_spec(
    "about_exhibition",
    tables.about_exhibition,
    tables.about_exhibition_qa,
    parent_key="about_exhibition_id",
)


def about_exhibition_page(*, engine: Optional[Engine] = None) -> QuestionPage:
    """Blank questions are rejected here (MICE drops them instead)."""
    return QuestionPage(ABOUT_EXHIBITION_SPEC, engine=engine)
