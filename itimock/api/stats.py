from fastapi import APIRouter, Depends, HTTPException
from itimock.api.deps import get_paper_store, get_question_store
from itimock.core.auth import get_current_user, TokenData
from itimock.core.cache import RedisCache, get_cache
from itimock.core.errors import MockTestError
from itimock.services.leaderboard import cached_leaderboard, user_record
from itimock.stores.base import PaperStore, QuestionStore

router = APIRouter()

@router.get("/leaderboard", dependencies=[Depends(get_current_user)])
def get_leaderboard(cache: RedisCache = Depends(get_cache), questions: QuestionStore = Depends(get_question_store),
                    papers: PaperStore = Depends(get_paper_store)):
    try:
        return {"top_contributors": cached_leaderboard(cache, questions, papers)}
    except MockTestError as e:
        raise HTTPException(503, str(e))

@router.get("/me")
def my_record(user: TokenData = Depends(get_current_user), questions: QuestionStore = Depends(get_question_store),
              papers: PaperStore = Depends(get_paper_store)):
    try:
        return user_record(questions, papers, user.sub)
    except MockTestError as e:
        raise HTTPException(503, str(e))
