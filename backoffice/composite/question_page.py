# backoffice/composite/question_page.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.engine import Engine

from backoffice.common.errors import ValidationError
from backoffice.composite.composite_writer import (
    ChildSpec,
    CompositePayload,
    CompositeSpec,
    CompositeWriter,
)
from backoffice.db.core import get_engine, read_connection


def question_page_spec(entity: str, page, questions, *, parent_key: str) -> CompositeSpec:
    """Banner page + ordered question/answer rows."""
    return CompositeSpec(
        entity=entity,
        parent=page,
        key="id",
        columns=("banner_image",),
        children=(
            ChildSpec(
                name="questions",
                table=questions,
                parent_key=parent_key,
                columns=("question", "answer", "display_order"),
                required=("question", "answer"),
            ),
        ),
    )


@dataclass(frozen=True)
class SavedPage:
    id: int
    created: bool
    questions: int


class QuestionPage:
    """
    A single-record page (the latest row wins) with a replace-set of Q&A rows.

    save():
      - no page yet : banner_image required, page + questions inserted
      - page exists : banner_image replaced when given, questions replaced
                      wholesale (old set deleted, new set inserted)
    Each branch is one CompositeWriter transaction.

    skip_blank=True drops pairs whose question or answer is blank instead of
    rejecting them.
    """

    def __init__(
        self,
        spec: CompositeSpec,
        *,
        engine: Optional[Engine] = None,
        skip_blank: bool = False,
    ) -> None:
        self._engine = engine or get_engine()
        self.spec = spec
        self.writer = CompositeWriter(spec, engine=self._engine)
        self._skip_blank = skip_blank

    def latest_id(self) -> Optional[int]:
        t = self.spec.parent
        with read_connection(self._engine) as conn:
            return conn.execute(
                select(t.c.id).order_by(t.c.id.desc()).limit(1)
            ).scalar_one_or_none()

    def latest(self) -> Optional[Dict[str, Any]]:
        page_id = self.latest_id()
        if page_id is None:
            return None
        data = self.writer.fetch(page_id)
        data["questions"].sort(key=lambda q: (q["display_order"], q["id"]))
        return data

    def save(
        self,
        banner_image: Optional[str],
        questions: Sequence[Mapping[str, Any]],
    ) -> SavedPage:
        banner = (banner_image or "").strip()
        parent = {"banner_image": banner} if banner else {}
        payload = CompositePayload(
            parent=parent, children={"questions": self._question_rows(questions)}
        )

        page_id = self.latest_id()
        if page_id is None:
            if not banner:
                raise ValidationError("banner_image is required for a new page")
            result = self.writer.create(payload)
            return SavedPage(result.parent_id, True, result.child_counts["questions"])

        result = self.writer.replace(page_id, payload)
        return SavedPage(page_id, False, result.child_counts["questions"])

    def delete(self, page_id: int) -> str:
        """Delete the page and its questions; returns the released banner path."""
        banner = self.writer.fetch(page_id)["banner_image"]
        self.writer.delete(page_id)
        return banner

    def _question_rows(self, questions: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for q in questions:
            question = (q.get("question") or "").strip()
            answer = (q.get("answer") or "").strip()
            if self._skip_blank and not (question and answer):
                continue
            rows.append({"question": question, "answer": answer, "display_order": len(rows)})
        return rows
