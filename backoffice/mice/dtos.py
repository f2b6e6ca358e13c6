from typing import List, Optional

from pydantic import BaseModel, Field, confloat


class QuestionInput(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None


class QuestionPageInput(BaseModel):
    # required for the first save only; omitted on edit keeps the stored banner
    banner_image: Optional[str] = None
    questions: List[QuestionInput] = []


class QuestionPageSavedDTO(BaseModel):
    id: int
    created: bool
    questions: int


class MicePackageInput(BaseModel):
    # set -> update days / price and add the images to the stored ones
    id: Optional[int] = None
    days: str = Field(min_length=1)
    price: confloat(gt=0)
    images: List[str] = []


class MicePackageSavedDTO(BaseModel):
    id: int
    created: bool
    images_added: int
