from datetime import datetime, timedelta, timezone
import pytest
from itimock.services.leaderboard import cached_leaderboard, leaderboard, user_record, window_starts
from itimock.services.paper_code import paper_code_tz
from fakes import MemoryPaperStore, MemoryQuestionStore, make_question

# Wednesday 2025-04-30, 15:30 IST
NOW = datetime(2025, 4, 30, 10, 0, tzinfo=timezone.utc)
IST = paper_code_tz()

def _at(day, hour=12):
    return datetime(2025, 4, day, hour, tzinfo=IST)

def test_window_starts():
    starts = window_starts(NOW)
    assert starts["day"] == datetime(2025, 4, 30, tzinfo=IST)
    assert starts["week"] == datetime(2025, 4, 27, tzinfo=IST)
    assert starts["month"] == datetime(2025, 4, 1, tzinfo=IST)

def test_week_starts_on_sunday():
    sunday = datetime(2025, 4, 27, 6, 0, tzinfo=timezone.utc)
    assert window_starts(sunday)["week"] == datetime(2025, 4, 27, tzinfo=IST)

def _paper(papers, user_id, score, created, submitted=True, code="ELE202504281405XY"):
    return papers.create({
        "paper_code": code, "trade_id": "T-ELE", "trade_name": "Electrician", "year": "1",
        "user_id": user_id, "user_name": user_id.upper(), "questions": [], "ques_count": 10,
        "score": score, "submitted": submitted, "is_original": False, "is_protected": False,
        "total_minutes": 60, "created_at": created,
    })

@pytest.fixture
def stores():
    questions = MemoryQuestionStore(
        [make_question(i, user_id="alice", user_name="Alice", created_at=_at(30)) for i in range(3)]
        + [make_question(10 + i, user_id="bob", user_name="Bob", created_at=_at(28)) for i in range(5)]
        + [make_question(20 + i, user_id="carol", user_name="Carol", created_at=_at(2)) for i in range(9)]
        + [make_question(40, user_id="dave", created_at=datetime(2025, 3, 30, tzinfo=IST))]
    )
    papers = MemoryPaperStore()
    _paper(papers, "alice", 7, _at(30))
    _paper(papers, "alice", 9, _at(29), code="ELE202504291000AB")
    _paper(papers, "bob", 8, _at(30))
    _paper(papers, "carol", 10, _at(10))
    _paper(papers, "erin", 10, _at(30), submitted=False, code="ELE202504301000CD")
    return questions, papers

def test_leaderboard_windows(stores):
    board = leaderboard(*stores, now=NOW)
    assert [r["user_id"] for r in board["day"]["contributors"]] == ["alice"]
    assert [r["user_id"] for r in board["week"]["contributors"]] == ["bob", "alice"]
    assert [(r["user_id"], r["questions_count"]) for r in board["month"]["contributors"]] == [("carol", 9), ("bob", 5), ("alice", 3)]
    assert [(r["user_id"], r["score"]) for r in board["day"]["scorers"]] == [("bob", 8), ("alice", 7)]
    assert [(r["user_id"], r["score"]) for r in board["week"]["scorers"]] == [("alice", 9), ("bob", 8)]
    assert board["month"]["scorers"][0] == {"user_id": "carol", "user_name": "CAROL", "score": 10}

def test_leaderboard_is_capped(stores):
    questions, papers = stores
    for n in range(8):
        questions.questions.append(make_question(200 + n, user_id=f"extra{n}", created_at=_at(30)))
    assert len(leaderboard(questions, papers, now=NOW)["day"]["contributors"]) == 5

def test_cached_leaderboard_hits_cache(stores, fake_cache):
    questions, papers = stores
    first = cached_leaderboard(fake_cache, questions, papers, now=NOW)
    calls = questions.list_calls
    second = cached_leaderboard(fake_cache, questions, papers, now=NOW + timedelta(minutes=5))
    assert second == first
    assert questions.list_calls == calls

def test_user_record(stores):
    record = user_record(*stores, user_id="alice", now=NOW)
    assert record["questions"] == [{"date": "2025-04-30", "count": 3}]
    assert sorted(s["score"] for s in record["scores"]) == [7, 9]
