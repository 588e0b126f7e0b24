from fakes import question_payload

def _seed(client, hdr, n=12):
    r = client.post("/v1/author/questions/bulk", headers=hdr, json={"questions": [question_payload(i) for i in range(n)]})
    assert r.status_code == 201, r.text
    return r.json()

def _generate(client, hdr, count=5):
    body = {"trade_id": "T-ELE", "trade_name": "Electrician", "year": "1", "ques_count": count}
    return client.post("/v1/papers/generate", headers=hdr, json=body)

def test_health(client):
    r = client.get("/health"); assert r.status_code == 200 and r.json() == {"status": "ok"}

def test_login_and_seed(client):
    r = client.post("/v1/auth/mock-login", json={"user_id": "tester", "roles": ["author", "student", "admin"], "user_name": "Tester"})
    assert r.status_code == 200; token = r.json()["access_token"]; hdr = {"Authorization": f"Bearer {token}"}
    r = client.post("/v1/author/questions", headers=hdr, json=question_payload(1)); assert r.status_code == 201
    assert r.json()["user_name"] == "Tester"
    r = client.get("/v1/author/questions", headers=hdr, params={"trade_id": "T-ELE", "year": "1"})
    assert r.json()["total"] == 1

def test_requires_token_and_role(client, auth):
    assert client.post("/v1/papers/generate", json={}).status_code in (401, 403)
    r = client.post("/v1/author/questions", headers=auth("s1", "student"), json=question_payload(0))
    assert r.status_code == 403

def test_generate_clone_submit_flow(client, auth):
    teacher, student = auth("t1", "teacher", name="Teacher"), auth("s1", "student", name="Ravi")
    _seed(client, teacher)
    r = _generate(client, teacher); assert r.status_code == 201, r.text
    issued = r.json()
    r = client.post("/v1/papers/clone", headers=student, json={"paper_code": issued["paper_code"]})
    assert r.status_code == 200; mine = r.json()
    assert mine["paper_code"] == issued["paper_code"] and mine["paper_id"] != issued["paper_id"]
    again = client.post("/v1/papers/clone", headers=student, json={"paper_code": issued["paper_code"]}).json()
    assert again == {"paper_id": mine["paper_id"], "paper_code": issued["paper_code"], "message": "already generated"}

    paper = client.get(f"/v1/papers/{mine['paper_id']}", headers=student).json()
    assert paper["user_name"] == "Ravi" and len(paper["questions"]) == 5
    assert all(q["correct_answer"] is None and q["response"] is None for q in paper["questions"])
    assert client.get(f"/v1/papers/{mine['paper_id']}", headers=teacher).status_code == 404

    assert client.post(f"/v1/papers/{mine['paper_id']}/start", headers=student).json()["start_time"] is not None
    first = paper["questions"][0]["id"]
    r = client.post(f"/v1/papers/{mine['paper_id']}/responses", headers=student, json={"question_id": first, "answer": "A"})
    assert r.status_code == 200
    r = client.post(f"/v1/papers/{mine['paper_id']}/submit", headers=student, json={"responses": {}})
    done = r.json(); assert done["submitted"] and done["score"] in (0, 1)
    assert all(q["correct_answer"] is None for q in done["questions"])
    assert client.post(f"/v1/papers/{mine['paper_id']}/submit", headers=student, json={}).status_code == 409

    rows = client.get("/v1/papers/results/me", headers=student).json()
    assert [r["paper_id"] for r in rows] == [mine["paper_id"]]
    board = client.get("/v1/stats/leaderboard", headers=student).json()["top_contributors"]
    assert board["day"]["contributors"][0]["user_id"] == "t1"
    assert client.get("/v1/stats/me", headers=teacher).json()["questions"][0]["count"] == 12

def test_errors_come_back_as_error_bodies(client, auth):
    hdr = auth("s1", "student")
    r = _generate(client, hdr)
    assert r.status_code == 400 and r.json() == {"error": "No Questions available for the specified trade and year."}
    r = client.post("/v1/papers/clone", headers=hdr, json={"paper_code": "ELE202504281405XY"})
    assert r.status_code == 400 and "error" in r.json()

def test_action_dispatcher(client, auth):
    teacher, student = auth("t1", "teacher"), auth("s1", "student")
    r = client.post("/v1/mock-test-service", headers=teacher,
                    json={"action": "bulkaddQuestions", "questions": [question_payload(i) for i in range(6)]})
    assert r.json()["total"] == 6
    r = client.post("/v1/mock-test-service", headers=student,
                    json={"action": "bulkaddQuestions", "questions": [question_payload(0)]})
    assert r.json() == {"error": "Insufficient role"}
    r = client.post("/v1/mock-test-service", headers=teacher, json={
        "action": "generateMockTest", "tradeId": "T-ELE", "tradeName": "Electrician", "year": "1",
        "quesCount": "4", "totalMinutes": 30, "userName": "Teacher"})
    generated = r.json(); assert r.status_code == 200 and "paper_code" in generated
    r = client.post("/v1/mock-test-service", headers=student, json={"action": "createNewMockTest", "paperId": generated["paper_code"]})
    assert "paper_id" in r.json()
    r = client.post("/v1/mock-test-service", headers=student, json={"action": "generateMockTest", "tradeId": "T-X",
                                                                     "tradeName": "Fitter", "year": "1", "quesCount": 3})
    assert r.status_code == 200 and "error" in r.json()

def test_answer_key_follows_original_protection(client, auth):
    teacher, student = auth("t1", "teacher"), auth("s1", "student")
    _seed(client, teacher)
    issued = _generate(client, teacher, count=4).json()
    mine = client.post("/v1/papers/clone", headers=student, json={"paper_code": issued["paper_code"]}).json()
    done = client.post(f"/v1/papers/{mine['paper_id']}/submit", headers=student, json={"responses": {}}).json()
    assert done["submitted"] and done["score"] == 0
    assert all(q["correct_answer"] is None for q in done["questions"])

    r = client.post(f"/v1/papers/{mine['paper_id']}/protection", headers=student, json={"is_protected": False})
    assert r.status_code == 400
    r = client.post(f"/v1/papers/{issued['paper_id']}/protection", headers=student, json={"is_protected": False})
    assert r.status_code == 404
    r = client.post(f"/v1/papers/{issued['paper_id']}/protection", headers=teacher, json={"is_protected": False})
    assert r.status_code == 200 and r.json()["is_protected"] is False

    shown = client.get(f"/v1/papers/{mine['paper_id']}", headers=student).json()
    assert all(q["correct_answer"] in ("A", "B", "C", "D") for q in shown["questions"])
    own = client.post(f"/v1/papers/{issued['paper_id']}/submit", headers=teacher, json={}).json()
    assert all(q["correct_answer"] for q in own["questions"])

def test_my_papers_lists_unsubmitted_and_pages(client, auth):
    teacher, student = auth("t1", "teacher"), auth("s1", "student")
    _seed(client, teacher, n=6)
    codes = [_generate(client, teacher, count=3).json()["paper_code"] for _ in range(3)]
    for code in codes:
        assert "paper_id" in client.post("/v1/papers/clone", headers=student, json={"paper_code": code}).json()

    first = client.get("/v1/papers/mine", headers=student, params={"page": 1, "page_size": 2}).json()
    second = client.get("/v1/papers/mine", headers=student, params={"page": 2, "page_size": 2}).json()
    assert first["total"] == second["total"] == 3
    assert len(first["items"]) == 2 and len(second["items"]) == 1
    rows = first["items"] + second["items"]
    assert sorted(r["paper_code"] for r in rows) == sorted(codes)
    assert all(not r["submitted"] and not r["is_original"] and not r["is_protected"] for r in rows)
    assert all(r["start_time"] is None and r["score"] is None for r in rows)

    owned = client.get("/v1/papers/mine", headers=teacher).json()
    assert owned["total"] == 3 and all(r["is_original"] and r["is_protected"] for r in owned["items"])
    assert client.get("/v1/papers/mine", headers=student, params={"page": 0}).status_code == 422
