import logging
import random
from datetime import datetime
from typing import Any, Dict, Iterable, Optional
from itimock.core.config import settings
from itimock.core.errors import DuplicatePaper, InvalidRequest, MockTestError, PoolEmpty, StoreUnavailable
from itimock.models.schemas import PaperQuestion
from itimock.services.pager import fetch_all
from itimock.services.paper_code import generate_paper_code
from itimock.services.sampling import sample_without_replacement
from itimock.stores.base import PaperStore, QuestionStore

logger = logging.getLogger(__name__)

def coerce_count(ques_count: Any) -> int:
    try:
        count = int(ques_count)
    except (TypeError, ValueError):
        raise InvalidRequest("Question count must be a whole number.")
    if count < 1:
        raise InvalidRequest("Question count must be at least 1.")
    return count

def generate_paper(questions: QuestionStore, papers: PaperStore, *, trade_id: str, trade_name: str, year: str,
                   ques_count: Any, user_id: str, user_name: Optional[str] = None, subject_id: Optional[str] = None,
                   module_ids: Optional[Iterable[str]] = None, total_minutes: Optional[int] = None,
                   rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Sample a fresh paper for ``user_id`` from the trade/year pool.

    Returns ``{"paper_id", "paper_code"}`` or ``{"error"}``; nothing is
    written when the pool is empty or a store call fails.
    """
    try:
        paper = _generate(questions, papers, trade_id, trade_name, year, ques_count, user_id, user_name,
                          subject_id, module_ids, total_minutes, rng, now)
    except MockTestError as e:
        logger.error("Paper generation failed for trade=%s year=%s user=%s: %s", trade_id, year, user_id, e)
        return {"error": str(e)}
    logger.info("Generated paper %s (%d questions) for user %s", paper.paper_code, paper.ques_count, user_id)
    return {"paper_id": paper.id, "paper_code": paper.paper_code}

def _generate(questions, papers, trade_id, trade_name, year, ques_count, user_id, user_name,
              subject_id, module_ids, total_minutes, rng, now):
    count = coerce_count(ques_count)
    rng = rng or random.Random()
    filters = {"trade_id": trade_id, "year": year, "subject_id": subject_id, "module_id": list(module_ids or []) or None}
    pool = fetch_all(lambda limit, offset: questions.list_ids(filters, limit, offset))
    if not pool:
        raise PoolEmpty("No Questions available for the specified trade and year.")
    picked = sample_without_replacement(pool, count, rng)
    paper_questions = [PaperQuestion.from_question(q) for q in questions.get_many(picked)]
    fields = {
        "trade_id": trade_id, "trade_name": trade_name, "year": year,
        "user_id": user_id, "user_name": user_name,
        "questions": paper_questions, "ques_count": len(paper_questions),
        "score": None, "submitted": False, "is_original": True, "is_protected": True,
        "total_minutes": int(total_minutes or settings.DEFAULT_TOTAL_MINUTES),
    }
    for _ in range(settings.PAPER_CODE_ATTEMPTS):
        code = generate_paper_code(trade_name, now=now, rng=rng)
        # the unique constraint only covers (paper_code, user_id); codes must not be shared across owners
        if papers.list({"paper_code": code}, limit=1).total:
            logger.warning("Paper code %s already in use, retrying", code)
            continue
        try:
            return papers.create({**fields, "paper_code": code})
        except DuplicatePaper:
            logger.warning("Paper code %s collided for user %s, retrying", code, user_id)
    raise StoreUnavailable("Could not allocate a unique paper code, try again.")
