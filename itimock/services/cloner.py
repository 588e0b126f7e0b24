import logging
import random
from typing import Any, Dict, Optional
from itimock.core.config import settings
from itimock.core.errors import DuplicateAttempt, DuplicatePaper, InvalidRequest, MockTestError, PaperNotFound
from itimock.models.schemas import PaperRecord
from itimock.services.sampling import fisher_yates
from itimock.stores.base import PaperStore

logger = logging.getLogger(__name__)

ALREADY_GENERATED = "already generated"

def clone_paper(papers: PaperStore, paper_code: str, user_id: str, user_name: Optional[str] = None,
                policy: Optional[str] = None, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Issue the paper behind ``paper_code`` to another user.

    The copy keeps the source's questions, clears every response and
    reshuffles their order. A user who already holds a paper under this code
    gets that paper back (``idempotent``) or an error (``reject``).
    """
    try:
        return _clone(papers, (paper_code or "").strip().upper(), user_id, user_name, policy or settings.DUPLICATE_POLICY, rng)
    except MockTestError as e:
        logger.error("Paper clone failed for code=%s user=%s: %s", paper_code, user_id, e)
        return {"error": str(e)}

def find_original(papers: PaperStore, paper_code: str) -> Optional[PaperRecord]:
    found = papers.list({"paper_code": paper_code, "is_original": True}, limit=1).items
    return found[0] if found else None

def _duplicate(paper: PaperRecord, policy: str) -> Dict[str, Any]:
    if policy == "reject":
        raise DuplicateAttempt("Test is already attempted by you.")
    logger.info("User %s already holds paper %s", paper.user_id, paper.paper_code)
    return {"paper_id": paper.id, "paper_code": paper.paper_code, "message": ALREADY_GENERATED}

def _clone(papers, paper_code, user_id, user_name, policy, rng):
    if not paper_code:
        raise InvalidRequest("Paper code is required.")
    mine = papers.list({"paper_code": paper_code, "user_id": user_id}, limit=1).items
    if mine:
        return _duplicate(mine[0], policy)
    source = find_original(papers, paper_code)
    if source is None:
        # legacy papers written before the original flag existed
        fallback = papers.list({"paper_code": paper_code}, limit=1).items
        if not fallback:
            raise PaperNotFound("No paper available for the selected code.")
        source = fallback[0]

    questions = [q.model_copy(update={"response": None}, deep=True) for q in source.questions]
    try:
        paper = papers.create({
            "paper_code": paper_code, "trade_id": source.trade_id, "trade_name": source.trade_name, "year": source.year,
            "user_id": user_id, "user_name": user_name,
            "questions": fisher_yates(questions, rng), "ques_count": source.ques_count,
            "score": None, "submitted": False, "is_original": False, "is_protected": False,
            "total_minutes": source.total_minutes,
        })
    except DuplicatePaper:
        # a concurrent request from the same user created it first
        winner = papers.list({"paper_code": paper_code, "user_id": user_id}).items
        if not winner:
            raise
        return _duplicate(winner[0], policy)
    logger.info("Cloned paper %s for user %s", paper_code, user_id)
    return {"paper_id": paper.id, "paper_code": paper.paper_code}
