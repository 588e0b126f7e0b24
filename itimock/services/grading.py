import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from itimock.core.errors import InvalidRequest, PaperAlreadySubmitted, PaperNotFound
from itimock.models.schemas import ANSWER_LABELS, PaperQuestion, PaperRecord
from itimock.services.cloner import find_original
from itimock.services.pager import fetch_all
from itimock.stores.base import Page, PaperStore

logger = logging.getLogger(__name__)

def normalize_answer(answer: Optional[str]) -> Optional[str]:
    if answer is None or answer == "":
        return None
    label = str(answer).strip().upper()
    if label not in ANSWER_LABELS:
        raise InvalidRequest(f"Answer must be one of {', '.join(ANSWER_LABELS)}.")
    return label

def score_questions(questions: List[PaperQuestion]) -> int:
    return sum(1 for q in questions if q.response is not None and q.response == q.correct_answer)

def get_owned_paper(papers: PaperStore, paper_id: str, user_id: str) -> PaperRecord:
    paper = papers.get(paper_id)
    if paper is None or paper.user_id != user_id:
        raise PaperNotFound("No paper available for the selected ID.")
    return paper

def _open_paper(papers: PaperStore, paper_id: str, user_id: str) -> PaperRecord:
    paper = get_owned_paper(papers, paper_id, user_id)
    if paper.submitted:
        raise PaperAlreadySubmitted("Paper has already been submitted.")
    return paper

def start_paper(papers: PaperStore, paper_id: str, user_id: str, now: Optional[datetime] = None) -> PaperRecord:
    paper = _open_paper(papers, paper_id, user_id)
    if paper.start_time is not None:
        return paper
    return papers.update(paper_id, {"start_time": now or datetime.now(timezone.utc)})

def _apply(questions: List[PaperQuestion], responses: Dict[str, Optional[str]]) -> List[PaperQuestion]:
    known = {q.id for q in questions}
    unknown = set(responses) - known
    if unknown:
        raise InvalidRequest(f"Questions not part of this paper: {', '.join(sorted(unknown))}")
    return [q.model_copy(update={"response": normalize_answer(responses[q.id])}) if q.id in responses else q
            for q in questions]

def record_response(papers: PaperStore, paper_id: str, user_id: str, question_id: str, answer: Optional[str]) -> PaperRecord:
    paper = _open_paper(papers, paper_id, user_id)
    return papers.update(paper_id, {"questions": _apply(paper.questions, {question_id: answer})})

def submit_paper(papers: PaperStore, paper_id: str, user_id: str, responses: Optional[Dict[str, Optional[str]]] = None,
                 now: Optional[datetime] = None) -> PaperRecord:
    paper = _open_paper(papers, paper_id, user_id)
    questions = _apply(paper.questions, responses or {})
    score = score_questions(questions)
    fields = {"questions": questions, "score": score, "submitted": True, "end_time": now or datetime.now(timezone.utc)}
    updated = papers.update(paper_id, fields)
    logger.info("Paper %s submitted by %s with score %d/%d", paper.paper_code, user_id, score, len(questions))
    return updated

def user_results(papers: PaperStore, user_id: str) -> List[PaperRecord]:
    filters = {"user_id": user_id, "submitted": True}
    return fetch_all(lambda limit, offset: papers.list(filters, limit, offset))

def list_user_papers(papers: PaperStore, user_id: str, limit: int, offset: int) -> Page:
    """Every paper the user holds, submitted or not."""
    return papers.list({"user_id": user_id}, limit, offset)

def answers_visible(papers: PaperStore, paper: PaperRecord) -> bool:
    """Answer keys show only after submission, and for a copy only while its original is unprotected."""
    if not paper.submitted:
        return False
    if paper.is_original:
        return True
    original = find_original(papers, paper.paper_code)
    return original is not None and not original.is_protected

def set_protection(papers: PaperStore, paper_id: str, user_id: str, protected: bool) -> PaperRecord:
    paper = get_owned_paper(papers, paper_id, user_id)
    if not paper.is_original:
        raise InvalidRequest("Protection can only be changed on the original paper.")
    updated = papers.update(paper_id, {"is_protected": protected})
    logger.info("Paper %s protection set to %s by %s", paper.paper_code, protected, user_id)
    return updated
