"""Single action endpoint for clients written against the old serverless function.

Results (including ``{"error": ...}``) are returned as-is with HTTP 200.
"""
import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional
from itimock.api.deps import get_paper_store, get_question_store
from itimock.core.auth import AUTHOR_ROLES, get_current_user, TokenData
from itimock.core.errors import MockTestError
from itimock.services.cloner import clone_paper
from itimock.services.generator import generate_paper
from itimock.services import question_bank
from itimock.stores.base import PaperStore, QuestionStore

logger = logging.getLogger(__name__)

router = APIRouter()

class ServiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["generateMockTest", "createNewMockTest", "bulkaddQuestions"]
    user_name: Optional[str] = Field(default=None, alias="userName")
    trade_name: Optional[str] = Field(default=None, alias="tradeName")
    trade_id: Optional[str] = Field(default=None, alias="tradeId")
    subject_id: Optional[str] = Field(default=None, alias="subjectId")
    year: Optional[str] = None
    ques_count: Optional[Any] = Field(default=None, alias="quesCount")
    paper_id: Optional[str] = Field(default=None, alias="paperId")
    selected_modules: List[str] = Field(default_factory=list, alias="selectedModules")
    total_minutes: Optional[int] = Field(default=None, alias="totalMinutes")
    questions: List[Dict[str, Any]] = Field(default_factory=list)

def _bulk_add(req: ServiceRequest, user: TokenData, questions: QuestionStore) -> dict:
    if not user.has_any(AUTHOR_ROLES):
        return {"error": "Insufficient role"}
    try:
        created = question_bank.add_questions(questions, question_bank.parse_questions(req.questions), user.sub,
                                              req.user_name or user.name)
    except MockTestError as e:
        logger.error("Bulk add failed for %s: %s", user.sub, e)
        return {"error": str(e)}
    return {"total": len(created), "ids": [q.id for q in created]}

@router.post("")
def dispatch(req: ServiceRequest, user: TokenData = Depends(get_current_user),
             questions: QuestionStore = Depends(get_question_store), papers: PaperStore = Depends(get_paper_store)) -> Dict[str, Any]:
    user_name = req.user_name or user.name
    if req.action == "generateMockTest":
        if not (req.trade_id and req.trade_name and req.year):
            return {"error": "tradeId, tradeName and year are required"}
        return generate_paper(
            questions, papers, trade_id=req.trade_id, trade_name=req.trade_name, year=req.year,
            ques_count=req.ques_count, user_id=user.sub, user_name=user_name, subject_id=req.subject_id,
            module_ids=req.selected_modules, total_minutes=req.total_minutes,
        )
    if req.action == "createNewMockTest":
        return clone_paper(papers, req.paper_id or "", user.sub, user_name)
    return _bulk_add(req, user, questions)
