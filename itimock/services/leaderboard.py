"""Top contributors and scorers per day/week/month, plus one user's record.

Windows start at local midnight in the paper-code timezone (IST); weeks
start on Sunday.
"""
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from itimock.core.cache import RedisCache
from itimock.core.config import settings
from itimock.models.schemas import PaperRecord, QuestionRecord
from itimock.services.pager import fetch_all
from itimock.services.paper_code import paper_code_tz
from itimock.stores.base import PaperStore, QuestionStore

logger = logging.getLogger(__name__)

def window_starts(now: datetime) -> Dict[str, datetime]:
    local = now.astimezone(paper_code_tz())
    day = local.replace(hour=0, minute=0, second=0, microsecond=0)
    week = day - timedelta(days=(day.weekday() + 1) % 7)
    month = day.replace(day=1)
    return {"day": day, "week": week, "month": month}

def _since(records, start: datetime):
    return [r for r in records if r.created_at is not None and r.created_at >= start]

def top_contributors(questions: List[QuestionRecord], limit: int) -> List[dict]:
    grouped: Dict[str, dict] = {}
    for q in questions:
        if not q.user_id: continue
        row = grouped.setdefault(q.user_id, {"user_id": q.user_id, "user_name": q.user_name, "questions_count": 0})
        row["questions_count"] += 1
        row["user_name"] = q.user_name or row["user_name"]
    return sorted(grouped.values(), key=lambda r: (-r["questions_count"], r["user_id"]))[:limit]

def top_scorers(papers: List[PaperRecord], limit: int) -> List[dict]:
    grouped: Dict[str, dict] = {}
    for p in papers:
        if not p.submitted: continue
        row = grouped.setdefault(p.user_id, {"user_id": p.user_id, "user_name": p.user_name, "score": 0})
        row["score"] = max(row["score"], p.score or 0)
        row["user_name"] = p.user_name or row["user_name"]
    return sorted(grouped.values(), key=lambda r: (-r["score"], r["user_id"]))[:limit]

def leaderboard(questions: QuestionStore, papers: PaperStore, now: Optional[datetime] = None) -> Dict[str, dict]:
    now = now or datetime.now(timezone.utc)
    starts = window_starts(now)
    month = starts["month"]
    # everything older than the month window is irrelevant to every window
    all_questions = _since(fetch_all(lambda limit, offset: questions.list({}, limit, offset)), month)
    all_papers = _since(fetch_all(lambda limit, offset: papers.list({"submitted": True}, limit, offset)), month)
    size = settings.LEADERBOARD_SIZE
    return {
        name: {
            "contributors": top_contributors(_since(all_questions, start), size),
            "scorers": top_scorers(_since(all_papers, start), size),
        }
        for name, start in starts.items()
    }

def cached_leaderboard(cache: RedisCache, questions: QuestionStore, papers: PaperStore,
                       now: Optional[datetime] = None) -> Dict[str, dict]:
    now = now or datetime.now(timezone.utc)
    key = f"leaderboard:{now.astimezone(paper_code_tz()):%Y%m%d}"
    hit = cache.get(key)
    if hit is not None:
        return hit
    board = leaderboard(questions, papers, now)
    cache.set(key, board, expire=settings.LEADERBOARD_TTL)
    logger.debug("Leaderboard cache refreshed (%s)", key)
    return board

def user_record(questions: QuestionStore, papers: PaperStore, user_id: str, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    month = window_starts(now)["month"]
    tz = paper_code_tz()
    mine_q = _since(fetch_all(lambda limit, offset: questions.list({"user_id": user_id}, limit, offset)), month)
    mine_p = _since(fetch_all(lambda limit, offset: papers.list({"user_id": user_id, "submitted": True}, limit, offset)), month)
    per_day: Dict[str, int] = defaultdict(int)
    for q in mine_q:
        per_day[f"{q.created_at.astimezone(tz):%Y-%m-%d}"] += 1
    return {
        "user_id": user_id,
        "questions": [{"date": d, "count": c} for d, c in sorted(per_day.items())],
        "scores": [{"paper_id": p.id, "paper_code": p.paper_code, "score": p.score or 0} for p in mine_p],
    }
