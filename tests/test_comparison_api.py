from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def _relation(session):
    left, right = session["left"]["value"], session["right"]["value"]
    if abs(left - right) < 1e-3:
        return "="
    return "<" if left < right else ">"


def _wrong(session):
    return next(s for s in ("<", "=", ">") if s != _relation(session))


def _start(**body):
    r = client.post("/comparison/sessions", json=body)
    assert r.status_code == 200
    return r.json()


def test_start_and_read_session():
    s = _start(difficulty="multiplicative", term_count=3)
    assert s["state"] == "playing"
    assert s["lives"] is None and s["time_left"] is None

    r = client.get(f"/comparison/sessions/{s['id']}")
    assert r.status_code == 200
    assert r.json()["left"] == s["left"]


def test_unknown_session_404():
    assert client.get("/comparison/sessions/nope").status_code == 404
    assert client.post("/comparison/sessions/nope/answer", json={"sign": "<"}).status_code == 404


def test_start_rejects_challenge_as_inner_difficulty():
    r = client.post(
        "/comparison/sessions",
        json={"difficulty": "challenge", "inner_difficulty": "challenge"},
    )
    assert r.status_code == 422


def test_start_rejects_bad_time_tier():
    r = client.post("/comparison/sessions", json={"difficulty": "challenge", "challenge_time": 4})
    assert r.status_code == 422


def test_correct_answer_awards_points():
    s = _start(difficulty="challenge", challenge_time=8, inner_difficulty="additive", term_count=4)
    r = client.post(f"/comparison/sessions/{s['id']}/answer", json={"sign": _relation(s)})
    assert r.status_code == 200
    body = r.json()
    assert body["correct"] is True
    assert body["points"] == 15  # 10 x 1.0 x 1.5
    assert body["session"]["score"] == 15
    assert body["session"]["streak"] == 1


def test_challenge_game_over_records_ranking_and_wrong_questions():
    s = _start(difficulty="challenge", challenge_time=3, inner_difficulty="bare")
    for _ in range(3):
        r = client.post(f"/comparison/sessions/{s['id']}/answer", json={"sign": _wrong(s)})
        assert r.status_code == 200
        s = r.json()["session"]
    assert s["state"] == "results"

    r = client.post(f"/comparison/sessions/{s['id']}/answer", json={"sign": "<"})
    assert r.status_code == 409

    ranks = client.get("/rankings/3").json()
    assert len(ranks["items"]) == 1
    assert ranks["items"][0]["score"] == 0

    wrong = client.get("/wrong-questions", params={"view_type": "COMPARISON"}).json()
    assert wrong["count"] >= 1


def test_end_session():
    s = _start(difficulty="bare")
    r = client.post(f"/comparison/sessions/{s['id']}/end")
    assert r.status_code == 200
    assert r.json()["state"] == "selecting"
    assert client.get(f"/comparison/sessions/{s['id']}").status_code == 404
