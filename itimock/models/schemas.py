from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

AnswerLabel = Literal["A", "B", "C", "D"]
ANSWER_LABELS = ("A", "B", "C", "D")

class QuestionIn(BaseModel):
    trade_id: str = Field(min_length=1)
    year: str = Field(min_length=1)
    subject_id: Optional[str] = None
    module_id: Optional[str] = None
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer: AnswerLabel
    images: List[str] = Field(default_factory=list)

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

class QuestionRecord(QuestionIn):
    id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    created_at: Optional[datetime] = None

class PaperQuestion(BaseModel):
    id: str
    question: str
    options: List[str]
    correct_answer: str
    images: List[str] = Field(default_factory=list)
    trade_id: str
    year: str
    module_id: str = ""
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    response: Optional[str] = None

    @classmethod
    def from_question(cls, q: QuestionRecord) -> "PaperQuestion":
        return cls(
            id=q.id, question=q.question, options=list(q.options), correct_answer=q.correct_answer,
            images=list(q.images), trade_id=q.trade_id, year=q.year, module_id=q.module_id or "",
            user_id=q.user_id, user_name=q.user_name, response=None,
        )

class PaperRecord(BaseModel):
    id: str
    paper_code: str
    trade_id: str
    trade_name: str
    year: str
    user_id: str
    user_name: Optional[str] = None
    questions: List[PaperQuestion]
    ques_count: int
    score: Optional[int] = None
    submitted: bool = False
    is_original: bool = False
    is_protected: bool = False
    total_minutes: int = 60
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
