from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import Integer, String, Text, Boolean, JSON, DateTime, UniqueConstraint

class Base(DeclarativeBase): pass

def _new_id() -> str: return uuid4().hex

def _utcnow() -> datetime: return datetime.now(timezone.utc)

class Question(Base):
    __tablename__ = "questions"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    trade_id: Mapped[str] = mapped_column(String, index=True)
    subject_id: Mapped[str | None] = mapped_column(String, nullable=True)
    module_id: Mapped[str | None] = mapped_column(String, nullable=True)
    year: Mapped[str] = mapped_column(String, index=True)
    question: Mapped[str] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JSON)
    correct_answer: Mapped[str] = mapped_column(String(1))
    images: Mapped[list] = mapped_column(JSON, default=list)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

class Paper(Base):
    __tablename__ = "papers"
    __table_args__ = (UniqueConstraint("paper_code", "user_id", name="uq_papers_code_user"),)
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    paper_code: Mapped[str] = mapped_column(String(17), index=True)
    trade_id: Mapped[str] = mapped_column(String)
    trade_name: Mapped[str] = mapped_column(String)
    year: Mapped[str] = mapped_column(String)
    user_id: Mapped[str] = mapped_column(String, index=True)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    # one serialized paper question per entry
    questions: Mapped[list] = mapped_column(JSON)
    ques_count: Mapped[int] = mapped_column(Integer)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    submitted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_original: Mapped[bool] = mapped_column(Boolean, default=False)
    is_protected: Mapped[bool] = mapped_column(Boolean, default=False)
    total_minutes: Mapped[int] = mapped_column(Integer, default=60)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
