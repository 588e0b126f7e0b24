from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, constr
from typing import Dict, List, Optional
from datetime import datetime
from itimock.api.deps import get_paper_store, get_question_store
from itimock.core.auth import TAKER_ROLES, require_roles, get_current_user, TokenData
from itimock.core.errors import InvalidRequest, MockTestError, PaperAlreadySubmitted, PaperNotFound
from itimock.models.schemas import PaperQuestion, PaperRecord
from itimock.services.cloner import clone_paper
from itimock.services.generator import generate_paper
from itimock.services import grading
from itimock.stores.base import PaperStore, QuestionStore

router = APIRouter()

class PaperGenerate(BaseModel):
    trade_id: constr(min_length=1)
    trade_name: constr(min_length=1)
    year: constr(min_length=1)
    ques_count: int = Field(ge=1, le=500)
    subject_id: Optional[str] = None
    module_ids: List[str] = Field(default_factory=list)
    total_minutes: Optional[int] = Field(default=None, ge=1, le=600)
    user_name: Optional[str] = None

class PaperClone(BaseModel):
    paper_code: constr(min_length=1)
    user_name: Optional[str] = None

class PaperIssued(BaseModel):
    paper_id: str
    paper_code: str
    message: Optional[str] = None

class QuestionView(BaseModel):
    id: str
    question: str
    options: List[str]
    images: List[str]
    response: Optional[str] = None
    correct_answer: Optional[str] = None

class PaperView(BaseModel):
    id: str
    paper_code: str
    trade_id: str
    trade_name: str
    year: str
    user_name: Optional[str] = None
    ques_count: int
    total_minutes: int
    score: Optional[int] = None
    submitted: bool
    is_original: bool
    is_protected: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    questions: List[QuestionView]

class ResponseIn(BaseModel):
    question_id: str
    answer: Optional[constr(min_length=1, max_length=1)] = None

class SubmitIn(BaseModel):
    responses: Dict[str, Optional[str]] = Field(default_factory=dict)

class ResultRow(BaseModel):
    paper_id: str
    paper_code: str
    trade_name: str
    year: str
    score: Optional[int] = None
    ques_count: int
    end_time: Optional[datetime] = None

class PaperSummary(BaseModel):
    paper_id: str
    paper_code: str
    trade_name: str
    year: str
    ques_count: int
    total_minutes: int
    score: Optional[int] = None
    submitted: bool
    is_original: bool
    is_protected: bool
    start_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

class PaperList(BaseModel):
    items: List[PaperSummary]
    total: int

class ProtectionIn(BaseModel):
    is_protected: bool

def _issued(result: dict):
    if "error" in result:
        return JSONResponse(status_code=400, content=result)
    return PaperIssued(**result)

def _question_view(q: PaperQuestion, reveal: bool) -> QuestionView:
    return QuestionView(id=q.id, question=q.question, options=q.options, images=q.images, response=q.response,
                        correct_answer=q.correct_answer if reveal else None)

def _paper_view(p: PaperRecord, papers: PaperStore) -> PaperView:
    reveal = grading.answers_visible(papers, p)
    return PaperView(
        id=p.id, paper_code=p.paper_code, trade_id=p.trade_id, trade_name=p.trade_name, year=p.year,
        user_name=p.user_name, ques_count=p.ques_count, total_minutes=p.total_minutes, score=p.score,
        submitted=p.submitted, is_original=p.is_original, is_protected=p.is_protected,
        start_time=p.start_time, end_time=p.end_time,
        questions=[_question_view(q, reveal=reveal) for q in p.questions],
    )

def _summary(p: PaperRecord) -> PaperSummary:
    return PaperSummary(paper_id=p.id, paper_code=p.paper_code, trade_name=p.trade_name, year=p.year,
                        ques_count=p.ques_count, total_minutes=p.total_minutes, score=p.score,
                        submitted=p.submitted, is_original=p.is_original, is_protected=p.is_protected,
                        start_time=p.start_time, created_at=p.created_at)

def _raise_http(e: MockTestError):
    if isinstance(e, PaperNotFound): raise HTTPException(404, str(e))
    if isinstance(e, PaperAlreadySubmitted): raise HTTPException(409, str(e))
    if isinstance(e, InvalidRequest): raise HTTPException(400, str(e))
    raise HTTPException(503, str(e))

@router.post("/generate", response_model=PaperIssued, status_code=201)
def generate(payload: PaperGenerate, user: TokenData = Depends(require_roles(*TAKER_ROLES)),
             questions: QuestionStore = Depends(get_question_store), papers: PaperStore = Depends(get_paper_store)):
    result = generate_paper(
        questions, papers, trade_id=payload.trade_id, trade_name=payload.trade_name, year=payload.year,
        ques_count=payload.ques_count, user_id=user.sub, user_name=payload.user_name or user.name,
        subject_id=payload.subject_id, module_ids=payload.module_ids, total_minutes=payload.total_minutes,
    )
    return _issued(result)

@router.post("/clone", response_model=PaperIssued)
def clone(payload: PaperClone, user: TokenData = Depends(require_roles(*TAKER_ROLES)), papers: PaperStore = Depends(get_paper_store)):
    return _issued(clone_paper(papers, payload.paper_code, user.sub, payload.user_name or user.name))

@router.get("/results/me", response_model=List[ResultRow])
def my_results(user: TokenData = Depends(get_current_user), papers: PaperStore = Depends(get_paper_store)):
    try:
        rows = grading.user_results(papers, user.sub)
    except MockTestError as e:
        _raise_http(e)
    return [ResultRow(paper_id=p.id, paper_code=p.paper_code, trade_name=p.trade_name, year=p.year,
                      score=p.score, ques_count=p.ques_count, end_time=p.end_time) for p in rows]

@router.get("/mine", response_model=PaperList)
def my_papers(page: int = Query(1, ge=1), page_size: int = Query(25, ge=1, le=100),
              user: TokenData = Depends(get_current_user), papers: PaperStore = Depends(get_paper_store)):
    try:
        res = grading.list_user_papers(papers, user.sub, page_size, (page - 1) * page_size)
    except MockTestError as e:
        _raise_http(e)
    return PaperList(items=[_summary(p) for p in res.items], total=res.total)

@router.get("/{paper_id}", response_model=PaperView)
def get_paper(paper_id: str, user: TokenData = Depends(get_current_user), papers: PaperStore = Depends(get_paper_store)):
    try:
        return _paper_view(grading.get_owned_paper(papers, paper_id, user.sub), papers)
    except MockTestError as e:
        _raise_http(e)

@router.post("/{paper_id}/start", response_model=PaperView)
def start(paper_id: str, user: TokenData = Depends(get_current_user), papers: PaperStore = Depends(get_paper_store)):
    try:
        return _paper_view(grading.start_paper(papers, paper_id, user.sub), papers)
    except MockTestError as e:
        _raise_http(e)

@router.post("/{paper_id}/responses", response_model=PaperView)
def respond(paper_id: str, payload: ResponseIn, user: TokenData = Depends(get_current_user), papers: PaperStore = Depends(get_paper_store)):
    try:
        return _paper_view(grading.record_response(papers, paper_id, user.sub, payload.question_id, payload.answer), papers)
    except MockTestError as e:
        _raise_http(e)

@router.post("/{paper_id}/submit", response_model=PaperView)
def submit(paper_id: str, payload: SubmitIn, user: TokenData = Depends(get_current_user), papers: PaperStore = Depends(get_paper_store)):
    try:
        return _paper_view(grading.submit_paper(papers, paper_id, user.sub, payload.responses), papers)
    except MockTestError as e:
        _raise_http(e)

@router.post("/{paper_id}/protection", response_model=PaperView)
def protection(paper_id: str, payload: ProtectionIn, user: TokenData = Depends(require_roles(*TAKER_ROLES)),
               papers: PaperStore = Depends(get_paper_store)):
    try:
        return _paper_view(grading.set_protection(papers, paper_id, user.sub, payload.is_protected), papers)
    except MockTestError as e:
        _raise_http(e)
