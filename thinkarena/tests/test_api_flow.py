from __future__ import annotations

from thinkarena import models
from thinkarena.errors import UpstreamUnavailable


def _auth(user_id: int) -> dict:
    return {"X-User-Id": str(user_id)}


def _aot_ids(client, uid) -> list[int]:
    r = client.get("/questions", headers=_auth(uid))
    assert r.status_code == 200, r.text
    return [q["id"] for q in r.json() if q["type"] == "aot"]


# -------------------------
# HEALTH / AUTH PRECONDITION
# -------------------------
def test_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_user_routes_require_user_id(client):
    r = client.get("/questions")
    assert r.status_code == 401
    assert r.json()["error"] == "HTTP_401"

    r = client.get("/questions", headers=_auth(987654321))
    assert r.status_code == 401


# -------------------------
# QUESTIONNAIRE
# -------------------------
def test_questions_list_contains_both_types(client, make_user):
    uid = make_user()
    data = client.get("/questions", headers=_auth(uid)).json()
    aot = [q for q in data if q["type"] == "aot"]
    topics = [q for q in data if q["type"] == "topic"]
    assert len(aot) == 12
    assert sum(1 for q in aot if q["is_reversed"]) == 7
    assert len(topics) == 18


def test_questionnaire_incomplete_reports_missing(client, make_user):
    uid = make_user()
    ids = _aot_ids(client, uid)
    for qid in ids[:-1]:
        r = client.post("/questions/responses", json={"question_id": qid, "question_type": "aot", "value": 4},
                        headers=_auth(uid))
        assert r.status_code == 201

    r = client.post("/questions/complete", headers=_auth(uid))
    assert r.status_code == 400
    assert "Missing 1 questions" in r.json()["detail"]


def test_questionnaire_complete_uses_latest_answers(client, make_user, db):
    uid = make_user()
    questions = [q for q in client.get("/questions", headers=_auth(uid)).json() if q["type"] == "aot"]

    for q in questions:
        client.post("/questions/responses", json={"question_id": q["id"], "question_type": "aot", "value": 1},
                    headers=_auth(uid))
    # change of mind on every item: only the newest answer counts
    for q in questions:
        client.post("/questions/responses", json={"question_id": q["id"], "question_type": "aot", "value": 6},
                    headers=_auth(uid))

    r = client.post("/questions/complete", headers=_auth(uid))
    assert r.status_code == 200, r.text
    reversed_n = sum(1 for q in questions if q["is_reversed"])
    expected = 6 * (len(questions) - reversed_n) + 1 * reversed_n
    assert r.json() == {"aot_score": expected, "has_completed_questionnaire": True}

    user = db.query(models.User).filter(models.User.id == uid).one()
    assert user.aot_score == expected


def test_response_value_out_of_range_rejected(client, make_user):
    uid = make_user()
    r = client.post("/questions/responses", json={"question_id": 1, "question_type": "aot", "value": 7},
                    headers=_auth(uid))
    assert r.status_code == 422


def test_topic_responses_latest_only(client, make_user):
    uid = make_user()
    topic = [q for q in client.get("/questions", headers=_auth(uid)).json() if q["type"] == "topic"][0]
    for v in (2, 5):
        client.post("/questions/responses", json={"question_id": topic["id"], "question_type": "topic", "value": v},
                    headers=_auth(uid))
    data = client.get("/questions/topic-responses", headers=_auth(uid)).json()
    assert data == [{"question_id": topic["id"], "question": topic["text"], "value": 5}]


# -------------------------
# DIALOGUE
# -------------------------
def test_training_turn_awards_points_and_badge_once(client, make_user, fake_provider):
    uid = make_user()
    reply = '{award_points: 5, type: "new_argument"} Great point! [badge: reason_giver]'
    fake_provider.replies = [reply, reply]
    body = {"question": "Prison sentences are too light", "user_response": "Because reoffending is high.",
            "dialogue_history": []}

    r = client.post("/dialogue/training", json=body, headers=_auth(uid))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["response"] == "Great point!"
    assert data["points"] == {"amount": 5, "type": "new_argument"}
    assert data["badge"]["name"] == "reason_giver"
    assert data["is_complete"] is False
    assert "Prison sentences are too light" in fake_provider.prompts[0]

    # second time the badge is already owned
    data = client.post("/dialogue/training", json=body, headers=_auth(uid)).json()
    assert data["badge"] is None

    mine = client.get("/badges/mine", headers=_auth(uid)).json()
    assert [b["name"] for b in mine] == ["reason_giver"]


def test_training_turn_completion_threshold(client, make_user, fake_provider):
    uid = make_user()
    history = [{"role": "user" if i % 2 else "assistant", "content": f"turn {i}"} for i in range(8)]
    fake_provider.replies = ['{award_points: 30, type: "completion"} Well done.']
    r = client.post("/dialogue/training", headers=_auth(uid), json={
        "question": "TikTok is harmful", "user_response": "I have changed my mind.", "dialogue_history": history,
    })
    assert r.json()["is_complete"] is True


def test_training_unknown_badge_ignored(client, make_user, fake_provider):
    uid = make_user()
    fake_provider.replies = ["Interesting. [badge: mind_reader]"]
    r = client.post("/dialogue/training", headers=_auth(uid), json={
        "question": "q", "user_response": "a", "dialogue_history": [],
    })
    data = r.json()
    assert data["badge"] is None
    assert data["points"] is None
    assert data["response"] == "Interesting."


def test_health_nut_segments_and_table(client, make_user, fake_provider):
    uid = make_user()
    fake_provider.replies = [
        '{award_points: 4, type: "clear"} Qaylee: OMG you are so right! '
        'Plato: Look at all four cells. {table: {"headers": ["", "Better", "Worse"], "rows": [["Tea", "8", "2"]]}}'
    ]
    r = client.post("/dialogue/health-nut", headers=_auth(uid), json={
        "user_response": "How many people felt worse?", "dialogue_history": [],
    })
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["points"] == {"amount": 4, "type": "clear"}
    assert [m["speaker"] for m in data["messages"]] == ["qaylee", "plato"]
    assert data["messages"][0]["table"] is None
    assert data["messages"][1]["table"]["rows"] == [["Tea", "8", "2"]]
    assert data["messages"][1]["content"] == "Look at all four cells."
    assert data["is_complete"] is False


def test_thought_zombies_category_scoring(client, make_user, fake_provider):
    uid = make_user()
    fake_provider.replies = [
        "[badge: link_cutter] That premise does not get you there. Why?\n"
        "[REASONING +10: solid] [ENGAGEMENT +6: engaged] [BONUS +2: fair]\n[TOTAL: +18]"
    ]
    r = client.post("/dialogue/thought-zombies", headers=_auth(uid), json={
        "ai_stance": "For", "user_stance": "Against", "user_argument": "It does not follow.",
        "conversation_history": [], "score_so_far": 85,
    })
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["score"] == 18
    assert data["categories"] == {"reasoning": 10, "engagement": 6, "bonus": 2}
    assert data["badge"]["name"] == "link_cutter"
    assert data["message"] == "That premise does not get you there. Why?"
    # 85 + 18 crosses the 100 point target
    assert data["is_complete"] is True

    # lookup only: nothing persisted until the client claims it
    assert client.get("/badges/mine", headers=_auth(uid)).json() == []


def test_upstream_failure_is_retryable_503(client, make_user, fake_provider, db):
    uid = make_user()
    fake_provider.error = UpstreamUnavailable("timed out", attempts=3)
    r = client.post("/dialogue/training", headers=_auth(uid), json={
        "question": "q", "user_response": "a", "dialogue_history": [],
    })
    assert r.status_code == 503
    assert r.json()["retryable"] is True

    failures = (
        db.query(models.Event)
        .filter(models.Event.user_id == uid, models.Event.action == models.ActionEnum.FAILURE_LOG)
        .count()
    )
    assert failures == 1


# -------------------------
# SCORES / BADGES / ADMIN
# -------------------------
def test_update_score_never_negative(client, make_user):
    uid = make_user()
    r = client.post("/scores/update", json={"points": 10}, headers=_auth(uid))
    assert r.json()["new_total_score"] == 10

    r = client.post("/scores/update", json={"points": -25}, headers=_auth(uid))
    data = r.json()
    assert data["new_total_score"] == 0
    assert data["applied_points"] == -10


def test_leaderboard_is_public_and_ranked(client, make_user):
    before = client.get("/scores/top").json()
    lead = before[0]["total_score"] if before else 0
    uid = make_user()
    client.post("/scores/update", json={"points": lead + 1000}, headers=_auth(uid))
    board = client.get("/scores/top").json()
    assert board[0]["id"] == uid
    assert board[0]["rank"] == 1
    assert len(board) <= 10
    assert all(row["total_score"] > 0 for row in board)


def test_award_badge_endpoint(client, make_user):
    uid = make_user()
    r = client.post("/badges/award", json={"badge_type": "evidence_expert"}, headers=_auth(uid))
    assert r.status_code == 200
    assert r.json()["already_awarded"] is False

    r = client.post("/badges/award", json={"badge_type": "evidence_expert"}, headers=_auth(uid))
    assert r.json()["already_awarded"] is True

    r = client.post("/badges/award", json={"badge_type": "mind_reader"}, headers=_auth(uid))
    assert r.status_code == 404


def test_display_name_and_onboarding(client, make_user):
    uid = make_user()
    r = client.post("/users/display-name", json={"display_name": "  Socrates  "}, headers=_auth(uid))
    assert r.json()["display_name"] == "Socrates"
    r = client.post("/users/onboarding", headers=_auth(uid))
    assert r.json()["has_completed_onboarding"] is True


def test_admin_routes_require_admin(client, make_user):
    uid = make_user()
    assert client.get("/admin/dashboard", headers=_auth(uid)).status_code == 403


def test_admin_dashboard_and_export(client, make_user):
    admin = make_user(is_admin=True)
    student = make_user(total_score=42)
    client.post("/badges/award", json={"badge_type": "fact_checker"}, headers=_auth(student))

    data = client.get("/admin/dashboard", headers=_auth(admin)).json()
    row = next(u for u in data["users"] if u["id"] == student)
    assert row["badge_count"] == 1
    assert row["total_score"] == 42
    assert data["summary"]["total_users"] >= 2

    r = client.get("/admin/points-export?format=csv", headers=_auth(admin))
    assert r.status_code == 200
    assert r.text.startswith("user_id,username")

    r = client.get("/admin/points-export", headers=_auth(admin))
    assert r.json()["total_users"] >= 2


# -------------------------
# SESSION TOTALS / AUDIT / ADMIN EXPORTS
# -------------------------
def _event_count(db, uid, action) -> int:
    return (
        db.query(models.Event)
        .filter(models.Event.user_id == uid, models.Event.action == action)
        .count()
    )


def test_training_completion_counts_session_points(client, make_user, fake_provider):
    uid = make_user()
    history = [{"role": "user" if i % 2 else "assistant", "content": f"turn {i}"} for i in range(9)]
    fake_provider.replies = ['{award_points: 5, type: "new_argument"} Good.'] * 2
    body = {"question": "q", "user_response": "a", "dialogue_history": history}

    fresh = client.post("/dialogue/training", headers=_auth(uid), json=body).json()
    assert fresh["is_complete"] is False

    late = client.post("/dialogue/training", headers=_auth(uid), json={**body, "points_so_far": 28}).json()
    assert late["is_complete"] is True


def test_health_nut_completion_counts_session_points(client, make_user, fake_provider):
    uid = make_user()
    history = [{"role": "user", "content": f"turn {i}"} for i in range(8)]
    fake_provider.replies = ['{award_points: 2, type: "clear"} Qaylee: Totally!']
    r = client.post("/dialogue/health-nut", headers=_auth(uid), json={
        "user_response": "ok", "dialogue_history": history, "points_so_far": 30,
    })
    assert r.json()["is_complete"] is True


def test_negative_points_so_far_rejected(client, make_user, fake_provider):
    uid = make_user()
    r = client.post("/dialogue/training", headers=_auth(uid), json={
        "question": "q", "user_response": "a", "points_so_far": -1,
    })
    assert r.status_code == 422


def test_unknown_question_ids_are_rejected(client, make_user, db):
    uid = make_user()
    r = client.post("/questions/responses", json={"question_id": 9999, "question_type": "aot", "value": 3},
                    headers=_auth(uid))
    assert r.status_code == 404

    r = client.post("/questions/responses", json={"question_id": 9999, "question_type": "topic", "value": 3},
                    headers=_auth(uid))
    assert r.status_code == 404

    # every real item answered; the rejected id never reaches the scorer
    for qid in _aot_ids(client, uid):
        client.post("/questions/responses", json={"question_id": qid, "question_type": "aot", "value": 3},
                    headers=_auth(uid))
    r = client.post("/questions/complete", headers=_auth(uid))
    assert r.status_code == 200, r.text
    assert _event_count(db, uid, models.ActionEnum.SUBMIT_RESPONSE) == 12


def test_dialogue_turns_are_audited(client, make_user, fake_provider, db):
    uid = make_user()
    fake_provider.replies = ["Why do you think so?"]
    client.post("/dialogue/training", headers=_auth(uid), json={
        "question": "q", "user_response": "a", "dialogue_history": [],
    })
    assert _event_count(db, uid, models.ActionEnum.DIALOGUE_TURN) == 1


def test_admin_dashboard_includes_topics_and_points_over_time(client, make_user):
    admin = make_user(is_admin=True)
    student = make_user(total_score=7)
    topic = [q for q in client.get("/questions", headers=_auth(student)).json() if q["type"] == "topic"][0]
    for v in (1, 4):
        client.post("/questions/responses", json={"question_id": topic["id"], "question_type": "topic", "value": v},
                    headers=_auth(student))

    data = client.get("/admin/dashboard", headers=_auth(admin)).json()
    row = next(u for u in data["users"] if u["id"] == student)
    assert row["topic_responses"] == [{"question_id": topic["id"], "question": topic["text"], "value": 4}]
    assert sum(p["total"] for p in data["points_over_time"]) == data["summary"]["total_points"]


def test_admin_aot_scores_filter_and_csv(client, make_user):
    admin = make_user(is_admin=True)
    student = make_user(aot_score=40, has_completed_questionnaire=True)

    data = client.get(f"/admin/aot-scores?user_id={student}", headers=_auth(admin)).json()["data"]
    assert [d["id"] for d in data] == [student]
    assert data[0]["aot_score"] == 40
    assert data[0]["topic_responses"] == []

    r = client.get(f"/admin/aot-scores?user_id={student}&format=csv", headers=_auth(admin))
    assert r.status_code == 200
    lines = r.text.strip().splitlines()
    assert lines[0] == "username,aot_score,questionnaire_completed,topic_questions,topic_responses"
    assert ",40,Yes," in lines[1]

    assert client.get("/admin/aot-scores", headers=_auth(student)).status_code == 403


def test_admin_user_responses_csv(client, make_user):
    admin = make_user(is_admin=True)
    student = make_user()
    qid = _aot_ids(client, student)[0]
    for v in (2, 5):
        client.post("/questions/responses", json={"question_id": qid, "question_type": "aot", "value": v},
                    headers=_auth(student))

    r = client.get("/admin/user-responses", headers=_auth(admin))
    assert r.status_code == 200
    lines = r.text.strip().splitlines()
    assert lines[0] == "username,user_id,question_id,question,type,value,created_at"
    mine = [line for line in lines[1:] if f",{student},{qid}," in line]
    assert len(mine) == 2
    assert all(",aot," in line for line in mine)
