from datetime import datetime, timedelta, timezone

import pytest

from tests.conftest import auth_header, verdict


def body(task_id, category="Dream Package", mcq_answers=(1, 1), coding_solutions=("def solve(): return 1",)):
    return {
        "taskId": task_id,
        "week": 1,
        "category": category,
        "mcqAnswers": list(mcq_answers),
        "codingSolutions": list(coding_solutions)
    }


def reset_calls(collections):
    for collection in collections.values():
        collection.calls.clear()


def test_submit_grades_and_stores(client, judge, collections, make_student, make_task):
    student_id = make_student()
    task_id = make_task()
    judge.responses.append(verdict(0.8))

    response = client.post("/api/submit", json=body(task_id), headers=auth_header(student_id, "student"))

    assert response.status_code == 201
    result = response.json()["submission"]
    assert (result["mcqScore"], result["codingScore"], result["totalScore"]) == (1, 1, 2)
    assert result["codingFeedback"][0]["questionIndex"] == 0
    assert len(collections["submissions"].docs) == 1
    assert collections["users"].docs[0]["progress"]["weeklyScores"] == {"1": 2}


def test_unauthenticated_submit_touches_nothing(client, collections, make_student, make_task):
    make_student()
    task_id = make_task()
    reset_calls(collections)

    response = client.post("/api/submit", json=body(task_id))

    assert response.status_code == 401
    assert all(collection.calls == [] for collection in collections.values())


def test_invalid_token(client, make_task):
    task_id = make_task()
    response = client.post("/api/submit", json=body(task_id), headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_alumni_cannot_submit(client, collections, make_alumni, make_task):
    alumni_id = make_alumni()
    task_id = make_task()

    response = client.post("/api/submit", json=body(task_id), headers=auth_header(alumni_id, "alumni"))

    assert response.status_code == 403
    assert collections["submissions"].docs == []


def test_malformed_payload(client, collections, make_student, make_task):
    student_id = make_student()
    task_id = make_task()
    payload = body(task_id)
    payload["mcqAnswers"] = ["first"]

    response = client.post("/api/submit", json=payload, headers=auth_header(student_id, "student"))

    assert response.status_code == 400
    assert "mcqAnswers" in response.json()["detail"]
    assert collections["submissions"].docs == []


@pytest.mark.parametrize("field, value", [
    ("week", "1"),
    ("mcqAnswers", ["1", 0]),
    ("mcqAnswers", [True, 0]),
    ("week", 1.5),
])
def test_non_numeric_values_rejected(client, judge, collections, make_student, make_task, field, value):
    student_id = make_student()
    task_id = make_task()
    payload = body(task_id)
    payload[field] = value

    response = client.post("/api/submit", json=payload, headers=auth_header(student_id, "student"))

    assert response.status_code == 400
    assert response.json()["detail"].startswith(field)
    assert judge.prompts == []
    assert collections["submissions"].docs == []


def test_category_mismatch(client, judge, collections, make_student, make_task):
    student_id = make_student(category="Higher Studies")
    task_id = make_task()

    response = client.post("/api/submit", json=body(task_id), headers=auth_header(student_id, "student"))

    assert response.status_code == 400
    assert response.json()["detail"] == "Category mismatch"
    assert judge.prompts == []
    assert collections["submissions"].docs == []


def test_unknown_task(client, make_student):
    student_id = make_student()
    response = client.post(
        "/api/submit", json=body("0123456789abcdef01234567"), headers=auth_header(student_id, "student")
    )
    assert response.status_code == 404


def test_expired_task(client, collections, make_student, make_task):
    student_id = make_student()
    task_id = make_task(deadline=datetime.now(timezone.utc) - timedelta(days=1))

    response = client.post("/api/submit", json=body(task_id), headers=auth_header(student_id, "student"))

    assert response.status_code == 400
    assert response.json()["detail"] == "Task deadline has passed"
    assert collections["submissions"].docs == []


def test_duplicate_redirects_to_stored_result(client, judge, collections, make_student, make_task):
    student_id = make_student()
    task_id = make_task()
    headers = auth_header(student_id, "student")
    judge.responses.append(verdict(1))
    client.post("/api/submit", json=body(task_id), headers=headers)
    stored = [dict(doc) for doc in collections["submissions"].docs]

    response = client.post("/api/submit", json=body(task_id, mcq_answers=(1, 0)), headers=headers,
                           follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"].endswith(f"/api/submissions/{task_id}")
    assert collections["submissions"].docs == stored

    result = client.get(f"/api/submissions/{task_id}", headers=headers)
    assert result.status_code == 200
    assert result.json()["totalScore"] == 2


def test_judge_failure_still_grades(client, judge, make_student, make_task):
    student_id = make_student()
    task_id = make_task()
    judge.responses.append(TimeoutError("judge timed out"))

    response = client.post("/api/submit", json=body(task_id), headers=auth_header(student_id, "student"))

    assert response.status_code == 201
    feedback = response.json()["submission"]["codingFeedback"][0]
    assert feedback["score"] == 0.5
    assert feedback["passesAllTests"] is False


def test_task_listing_hides_answers(client, make_student, make_task):
    student_id = make_student()
    make_task(week=2)
    make_task(week=1)

    response = client.get("/api/tasks", headers=auth_header(student_id, "student"))

    assert response.status_code == 200
    assert [task["week"] for task in response.json()] == [1, 2]
    assert "correctAnswer" not in response.text


def test_enter_task_after_submitting_redirects(client, judge, make_student, make_task):
    student_id = make_student()
    task_id = make_task()
    headers = auth_header(student_id, "student")

    assert client.get(f"/api/tasks/{task_id}", headers=headers).status_code == 200

    judge.responses.append(verdict(1))
    client.post("/api/submit", json=body(task_id), headers=headers)
    response = client.get(f"/api/tasks/{task_id}", headers=headers, follow_redirects=False)

    assert response.status_code == 303


def test_enter_task_from_other_category(client, make_student, make_task):
    student_id = make_student(category="Dream Package")
    task_id = make_task(category="Higher Studies")

    response = client.get(f"/api/tasks/{task_id}", headers=auth_header(student_id, "student"))

    assert response.status_code == 400
    assert response.json()["detail"] == "Category mismatch"


def test_enter_expired_task(client, make_student, make_task):
    student_id = make_student()
    task_id = make_task(deadline=datetime.now(timezone.utc) - timedelta(days=1))

    response = client.get(f"/api/tasks/{task_id}", headers=auth_header(student_id, "student"))

    assert response.status_code == 400
    assert response.json()["detail"] == "Task deadline has passed"


def test_task_board(client, judge, make_student, make_task):
    student_id = make_student()
    done = make_task(week=1)
    make_task(week=2)
    make_task(week=3, deadline=datetime.now(timezone.utc) - timedelta(days=1))
    headers = auth_header(student_id, "student")
    judge.responses.append(verdict(1))
    client.post("/api/submit", json=body(done), headers=headers)

    board = client.get("/api/tasks/board", headers=headers).json()

    assert [t["week"] for t in board["completed"]] == [1]
    assert board["completed"][0]["totalScore"] == 2
    assert [t["week"] for t in board["pending"]] == [2]
    assert [t["week"] for t in board["expired"]] == [3]


def test_evaluate_code(client, judge, make_student):
    student_id = make_student()
    judge.responses.append("Correct, O(n) time.")

    response = client.post(
        "/api/evaluate-code", json={"code": "print(1)", "question": "Print one"},
        headers=auth_header(student_id, "student")
    )

    assert response.status_code == 200
    assert response.json() == {"evaluation": "Correct, O(n) time."}


def test_evaluate_code_failure(client, judge, make_student):
    student_id = make_student()
    judge.responses.append(RuntimeError("judge down"))

    response = client.post(
        "/api/evaluate-code", json={"code": "print(1)", "question": "Print one"},
        headers=auth_header(student_id, "student")
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "An error occurred during code evaluation"
