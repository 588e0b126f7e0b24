from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import List, Optional
from itimock.api.deps import get_question_store
from itimock.core.auth import AUTHOR_ROLES, require_roles, TokenData
from itimock.core.errors import InvalidRequest, MockTestError, NotAllowed, QuestionNotFound
from itimock.models.schemas import QuestionIn, QuestionRecord
from itimock.services import question_bank
from itimock.stores.base import QuestionStore

router = APIRouter()

class QuestionPage(BaseModel):
    items: List[QuestionRecord]
    total: int

class BulkQuestions(BaseModel):
    questions: List[QuestionIn]

def _raise_http(e: MockTestError):
    if isinstance(e, QuestionNotFound): raise HTTPException(404, str(e))
    if isinstance(e, NotAllowed): raise HTTPException(403, str(e))
    if isinstance(e, InvalidRequest): raise HTTPException(400, str(e))
    raise HTTPException(503, str(e))

@router.post("/questions", response_model=QuestionRecord, status_code=201)
def create_question(payload: QuestionIn, user: TokenData = Depends(require_roles(*AUTHOR_ROLES)),
                    store: QuestionStore = Depends(get_question_store)):
    try:
        return question_bank.add_questions(store, [payload], user.sub, user.name)[0]
    except MockTestError as e:
        _raise_http(e)

@router.post("/questions/bulk", response_model=List[QuestionRecord], status_code=201)
def bulk_create(payload: BulkQuestions, user: TokenData = Depends(require_roles(*AUTHOR_ROLES)),
                store: QuestionStore = Depends(get_question_store)):
    try:
        return question_bank.add_questions(store, payload.questions, user.sub, user.name)
    except MockTestError as e:
        _raise_http(e)

@router.get("/questions", response_model=QuestionPage)
def list_questions(trade_id: Optional[str] = None, year: Optional[str] = None, module_id: Optional[str] = None,
                   mine: bool = False, page: int = Query(1, ge=1), page_size: int = Query(25, ge=1, le=100),
                   user: TokenData = Depends(require_roles(*AUTHOR_ROLES)), store: QuestionStore = Depends(get_question_store)):
    try:
        res = question_bank.list_questions(store, trade_id, year, page_size, (page - 1) * page_size,
                                           module_id=module_id, user_id=user.sub if mine else None)
    except MockTestError as e:
        _raise_http(e)
    return QuestionPage(items=res.items, total=res.total)

@router.delete("/questions/{question_id}", status_code=204)
def delete_question(question_id: str, user: TokenData = Depends(require_roles(*AUTHOR_ROLES)),
                    store: QuestionStore = Depends(get_question_store)):
    try:
        question_bank.delete_question(store, question_id, user.sub, is_admin=user.is_admin)
    except MockTestError as e:
        _raise_http(e)
