import json
import logging
from datetime import timezone
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from itimock.core.errors import DuplicatePaper, PaperNotFound, StoreUnavailable
from itimock.models.orm import Question, Paper
from itimock.models.schemas import PaperQuestion, PaperRecord, QuestionIn, QuestionRecord
from itimock.stores.base import Filters, Page

logger = logging.getLogger(__name__)

def _where(model, filters: Filters):
    clauses = []
    for name, value in filters.items():
        if value is None: continue
        col = getattr(model, name)
        if isinstance(value, (list, tuple, set)):
            clauses.append(col.in_(list(value)))
        else:
            clauses.append(col == value)
    return clauses

def _aware(dt):
    # SQLite hands back naive datetimes
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def _question_record(q: Question) -> QuestionRecord:
    return QuestionRecord(
        id=q.id, trade_id=q.trade_id, subject_id=q.subject_id, module_id=q.module_id, year=q.year,
        question=q.question, options=list(q.options), correct_answer=q.correct_answer, images=list(q.images or []),
        user_id=q.user_id, user_name=q.user_name, created_at=_aware(q.created_at),
    )

def _paper_record(p: Paper) -> PaperRecord:
    return PaperRecord(
        id=p.id, paper_code=p.paper_code, trade_id=p.trade_id, trade_name=p.trade_name, year=p.year,
        user_id=p.user_id, user_name=p.user_name,
        questions=[PaperQuestion.model_validate_json(raw) for raw in p.questions],
        ques_count=p.ques_count, score=p.score, submitted=p.submitted, is_original=p.is_original,
        is_protected=p.is_protected, total_minutes=p.total_minutes,
        start_time=_aware(p.start_time), end_time=_aware(p.end_time), created_at=_aware(p.created_at),
    )

def _serialize_questions(questions: List[PaperQuestion]) -> List[str]:
    return [q.model_dump_json() if isinstance(q, PaperQuestion) else json.dumps(q) for q in questions]

class SqlQuestionStore:
    def __init__(self, db: Session):
        self.db = db

    def _page(self, stmt, filters: Filters, limit: int, offset: int) -> Page:
        try:
            where = _where(Question, filters)
            total = self.db.scalar(select(func.count()).select_from(Question).where(*where)) or 0
            rows = self.db.execute(stmt.where(*where).order_by(Question.created_at, Question.id).limit(limit).offset(offset)).scalars().all()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Question store unavailable: {e}") from e
        return Page(items=list(rows), total=total)

    def list(self, filters: Filters, limit: int, offset: int) -> Page:
        page = self._page(select(Question), filters, limit, offset)
        page.items = [_question_record(q) for q in page.items]
        return page

    def list_ids(self, filters: Filters, limit: int, offset: int) -> Page:
        return self._page(select(Question.id), filters, limit, offset)

    def get_many(self, ids: Iterable[str]) -> List[QuestionRecord]:
        ids = list(ids)
        if not ids: return []
        try:
            rows = self.db.execute(select(Question).where(Question.id.in_(ids))).scalars().all()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Question store unavailable: {e}") from e
        by_id = {q.id: _question_record(q) for q in rows}
        return [by_id[i] for i in ids if i in by_id]

    def create_many(self, questions: List[QuestionIn], user_id: Optional[str], user_name: Optional[str]) -> List[QuestionRecord]:
        rows = [Question(**q.model_dump(), user_id=user_id, user_name=user_name) for q in questions]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(f"Question store unavailable: {e}") from e
        return [_question_record(q) for q in rows]

    def delete(self, question_id: str) -> bool:
        try:
            res = self.db.execute(delete(Question).where(Question.id == question_id))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(f"Question store unavailable: {e}") from e
        return res.rowcount > 0

class SqlPaperStore:
    def __init__(self, db: Session):
        self.db = db

    def list(self, filters: Filters, limit: Optional[int] = None, offset: int = 0) -> Page:
        where = _where(Paper, filters)
        stmt = select(Paper).where(*where).order_by(Paper.created_at, Paper.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            total = self.db.scalar(select(func.count()).select_from(Paper).where(*where)) or 0
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Paper store unavailable: {e}") from e
        return Page(items=[_paper_record(p) for p in rows], total=total)

    def get(self, paper_id: str) -> Optional[PaperRecord]:
        try:
            p = self.db.get(Paper, paper_id)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Paper store unavailable: {e}") from e
        return _paper_record(p) if p else None

    def create(self, fields: Dict[str, Any]) -> PaperRecord:
        data = dict(fields)
        data["questions"] = _serialize_questions(data["questions"])
        p = Paper(**data)
        try:
            self.db.add(p)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Paper %s already exists for user %s", data.get("paper_code"), data.get("user_id"))
            raise DuplicatePaper("A paper with this code already exists for this user.") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(f"Paper store unavailable: {e}") from e
        return _paper_record(p)

    def update(self, paper_id: str, fields: Dict[str, Any]) -> PaperRecord:
        data = dict(fields)
        if "questions" in data:
            data["questions"] = _serialize_questions(data["questions"])
        try:
            p = self.db.get(Paper, paper_id)
            if p is None:
                raise PaperNotFound("No paper available for the selected ID.")
            for k, v in data.items():
                setattr(p, k, v)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(f"Paper store unavailable: {e}") from e
        return _paper_record(p)
