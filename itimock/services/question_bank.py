import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from itimock.core.config import settings
from itimock.core.errors import InvalidRequest, NotAllowed, QuestionNotFound
from itimock.models.schemas import QuestionIn, QuestionRecord
from itimock.stores.base import Page, QuestionStore

logger = logging.getLogger(__name__)

def parse_questions(raw: List[Dict[str, Any]]) -> List[QuestionIn]:
    parsed = []
    for i, item in enumerate(raw or []):
        try:
            parsed.append(QuestionIn.model_validate(item))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"])
            raise InvalidRequest(f"Question {i + 1}: {field}: {first['msg']}")
    return parsed

def add_questions(store: QuestionStore, questions: List[QuestionIn], user_id: Optional[str], user_name: Optional[str]) -> List[QuestionRecord]:
    """All-or-nothing insert of validated questions."""
    if not questions:
        raise InvalidRequest("No questions supplied.")
    if len(questions) > settings.BULK_MAX_QUESTIONS:
        raise InvalidRequest(f"At most {settings.BULK_MAX_QUESTIONS} questions can be added at once.")
    created = store.create_many(questions, user_id, user_name)
    logger.info("User %s added %d questions", user_id, len(created))
    return created

def list_questions(store: QuestionStore, trade_id: Optional[str], year: Optional[str], limit: int, offset: int,
                   module_id: Optional[str] = None, user_id: Optional[str] = None) -> Page:
    filters = {"trade_id": trade_id, "year": year, "module_id": module_id, "user_id": user_id}
    return store.list(filters, limit, offset)

def delete_question(store: QuestionStore, question_id: str, user_id: str, is_admin: bool = False) -> None:
    found = store.get_many([question_id])
    if not found:
        raise QuestionNotFound("Question not found.")
    if not is_admin and found[0].user_id != user_id:
        raise NotAllowed("Only the author or an admin can delete this question.")
    store.delete(question_id)
    logger.info("Question %s deleted by %s", question_id, user_id)
