from fastapi.testclient import TestClient

from expressions import evaluate_text
from main import app

client = TestClient(app)


def test_generate_multiplicative_expression():
    for _ in range(20):
        r = client.get("/expressions", params={"tier": "multiplicative", "terms": 4})
        assert r.status_code == 200
        body = r.json()
        assert evaluate_text(body["text"]) == body["value"]


def test_generate_bare_expression():
    r = client.get("/expressions", params={"tier": "bare"})
    body = r.json()
    assert body["text"] == str(body["value"])
    assert 1 <= body["value"] <= 98


def test_generate_rejects_challenge_tier():
    r = client.get("/expressions", params={"tier": "challenge"})
    assert r.status_code == 422


def test_generate_rejects_term_count_out_of_range():
    r = client.get("/expressions", params={"tier": "additive", "terms": 5})
    assert r.status_code == 422


def test_pair_relation_matches_values():
    r = client.get("/expressions/pair", params={"tier": "additive", "terms": 3})
    body = r.json()
    left, right = body["left"]["value"], body["right"]["value"]
    expected = "=" if left == right else ("<" if left < right else ">")
    assert body["relation"] == expected


def test_compare_epsilon():
    assert client.post("/compare", json={"left": 7, "right": 7.0003}).json()["relation"] == "="
    assert client.post("/compare", json={"left": 7, "right": 7.01}).json()["relation"] == "<"


def test_points_endpoint():
    r = client.post(
        "/points",
        json={
            "is_correct": True,
            "difficulty": "challenge",
            "time_budget": 3,
            "inner_difficulty": "multiplicative",
            "term_count": 4,
        },
    )
    assert r.status_code == 200
    assert r.json()["points"] == 42
