from typing import List, Optional

from pydantic import BaseModel


class QuestionAnswerInput(BaseModel):
    question: str
    answer: str


class AboutExhibitionInput(BaseModel):
    # required for the first save only; omitted on edit keeps the stored banner
    banner_image: Optional[str] = None
    questions: List[QuestionAnswerInput] = []


class AboutExhibitionSavedDTO(BaseModel):
    id: int
    created: bool
    questions: int
