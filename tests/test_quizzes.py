from datetime import datetime, timedelta, timezone

import pytest

from filmacademy.models import registry as models
from filmacademy.modules.quizzes.service import compute_score, elapsed_seconds


def _answers(quiz, right):
    """Answer the first `right` questions correctly and the rest wrong."""
    return {
        str(question_id): "B" if index < right else "C"
        for index, question_id in enumerate(quiz.question_ids)
    }


def _submit(client, headers, quiz, right, **extra):
    return client.post(
        f"/quizzes/{quiz.id}/attempts",
        json={"answers": _answers(quiz, right), **extra},
        headers=headers,
    )


def _configure_quiz(session, quiz_id, **values):
    session.query(models.CourseQuiz).filter(models.CourseQuiz.id == quiz_id).update(values)
    session.commit()


@pytest.mark.parametrize(
    "correct, total, score",
    [(9, 10, 90), (1, 8, 13), (2, 3, 67), (1, 3, 33), (0, 5, 0), (5, 5, 100), (7, 10, 70)],
)
def test_compute_score_rounds_half_up(correct, total, score):
    assert compute_score(correct, total) == score


def test_compute_score_requires_questions():
    with pytest.raises(ValueError):
        compute_score(0, 0)


def test_elapsed_seconds():
    now = datetime(2025, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    assert elapsed_seconds(None, now) is None
    assert elapsed_seconds(now - timedelta(minutes=2), now) == 120
    assert elapsed_seconds(datetime(2025, 5, 1, 11, 59, 30), now) == 30
    assert elapsed_seconds(now + timedelta(minutes=5), now) == 0


def test_list_course_quizzes(client, test_quiz):
    res = client.get(f"/courses/{test_quiz.course_id}/quizzes")
    assert res.status_code == 200
    assert [quiz["id"] for quiz in res.json()] == [test_quiz.id]


def test_list_quizzes_unknown_course(client):
    assert client.get("/courses/777/quizzes").status_code == 404


def test_questions_hide_answer_key(client, auth_headers, test_quiz):
    res = client.get(f"/quizzes/{test_quiz.id}/questions", headers=auth_headers)
    assert res.status_code == 200
    questions = res.json()
    assert [question["id"] for question in questions] == test_quiz.question_ids
    for question in questions:
        assert "correct_answer" not in question
        assert "explanation" not in question
        assert question["options"] == ["A", "B", "C", "D"]


def test_submit_attempt_scores_and_passes(client, auth_headers, test_quiz):
    res = _submit(client, auth_headers, test_quiz, 9)
    assert res.status_code == 201
    body = res.json()
    assert body["score"] == 90
    assert body["passed"] is True
    assert body["attempt_number"] == 1
    assert body["correct_count"] == 9
    assert body["total_questions"] == 10
    assert body["passing_score"] == 70
    assert body["time_taken_seconds"] is None
    assert len(body["feedback"]) == 10
    assert body["feedback"][9]["is_correct"] is False
    assert body["feedback"][9]["correct_answer"] == "B"
    assert body["feedback"][0]["explanation"] == "Because of rule 1"
    assert body["answers"][str(test_quiz.question_ids[0])] == "B"


def test_submit_attempt_below_passing_score(client, auth_headers, test_quiz):
    body = _submit(client, auth_headers, test_quiz, 6).json()
    assert body["score"] == 60
    assert body["passed"] is False


def test_passing_score_is_inclusive(client, auth_headers, test_quiz):
    body = _submit(client, auth_headers, test_quiz, 7).json()
    assert body["score"] == 70
    assert body["passed"] is True


def test_quiz_passing_score_overrides_default(client, session, auth_headers, test_quiz):
    _configure_quiz(session, test_quiz.id, passing_score=95)
    body = _submit(client, auth_headers, test_quiz, 9).json()
    assert body["passing_score"] == 95
    assert body["passed"] is False


def test_unanswered_questions_count_as_wrong(client, auth_headers, test_quiz):
    res = client.post(
        f"/quizzes/{test_quiz.id}/attempts",
        json={"answers": {str(test_quiz.question_ids[0]): "B"}},
        headers=auth_headers,
    )
    body = res.json()
    assert body["score"] == 10
    assert body["answers"] == {str(test_quiz.question_ids[0]): "B"}
    assert body["feedback"][1]["selected_answer"] is None


def test_attempt_numbers_increase(client, auth_headers, test_quiz):
    assert _submit(client, auth_headers, test_quiz, 3).json()["attempt_number"] == 1
    assert _submit(client, auth_headers, test_quiz, 8).json()["attempt_number"] == 2

    res = client.get(f"/quizzes/{test_quiz.id}/attempts", headers=auth_headers)
    assert res.status_code == 200
    assert [attempt["attempt_number"] for attempt in res.json()] == [2, 1]
    assert [attempt["score"] for attempt in res.json()] == [80, 30]


def test_attempt_numbers_are_per_user(client, auth_headers, user2_headers, test_quiz):
    _submit(client, auth_headers, test_quiz, 3)
    _submit(client, auth_headers, test_quiz, 3)
    assert _submit(client, user2_headers, test_quiz, 3).json()["attempt_number"] == 1


def test_max_attempts_enforced(client, session, auth_headers, test_quiz):
    _configure_quiz(session, test_quiz.id, max_attempts=1)
    assert _submit(client, auth_headers, test_quiz, 5).status_code == 201

    res = _submit(client, auth_headers, test_quiz, 10)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "max_attempts_exceeded"
    assert session.query(models.QuizAttempt).count() == 1


def test_time_taken_from_started_at(client, auth_headers, test_quiz):
    started_at = (datetime.now(timezone.utc) - timedelta(minutes=3)).isoformat()
    body = _submit(client, auth_headers, test_quiz, 5, started_at=started_at).json()
    assert 170 <= body["time_taken_seconds"] <= 200


def test_quiz_without_questions(client, session, auth_headers, test_course):
    quiz = models.CourseQuiz(course_id=test_course.id, title="Empty")
    session.add(quiz)
    session.commit()

    res = client.post(
        f"/quizzes/{quiz.id}/attempts", json={"answers": {}}, headers=auth_headers
    )
    assert res.status_code == 422
    assert session.query(models.QuizAttempt).count() == 0


def test_submit_unknown_quiz(client, auth_headers):
    res = client.post("/quizzes/999/attempts", json={"answers": {}}, headers=auth_headers)
    assert res.status_code == 404


def test_submit_requires_authentication(client, test_quiz):
    res = client.post(f"/quizzes/{test_quiz.id}/attempts", json={"answers": {}})
    assert res.status_code == 401


def test_admin_authors_quiz(client, admin_headers, test_course):
    res = client.post(
        f"/admin/courses/{test_course.id}/quizzes",
        json={"title": "Lenses", "passing_score": 80, "max_attempts": 3},
        headers=admin_headers,
    )
    assert res.status_code == 201
    quiz_id = res.json()["id"]

    res = client.post(
        f"/admin/quizzes/{quiz_id}/questions",
        json={
            "question_text": "Which focal length is wide?",
            "options": ["24mm", "85mm", "135mm"],
            "correct_answer": "24mm",
            "explanation": "Shorter focal lengths widen the field of view.",
        },
        headers=admin_headers,
    )
    assert res.status_code == 201
    assert res.json()["correct_answer"] == "24mm"

    res = client.post(
        f"/admin/quizzes/{quiz_id}/questions",
        json={
            "question_text": "A dolly zoom changes focal length while moving.",
            "question_type": "true_false",
            "correct_answer": "True",
        },
        headers=admin_headers,
    )
    assert res.status_code == 201
    assert res.json()["options"] == ["True", "False"]


def test_admin_question_answer_must_be_an_option(client, admin_headers, test_quiz):
    res = client.post(
        f"/admin/quizzes/{test_quiz.id}/questions",
        json={
            "question_text": "Pick one",
            "options": ["A", "B"],
            "correct_answer": "Z",
        },
        headers=admin_headers,
    )
    assert res.status_code == 422


def test_quiz_analytics(client, auth_headers, user2_headers, admin_headers, test_quiz):
    started_at = (datetime.now(timezone.utc) - timedelta(seconds=60)).isoformat()
    _submit(client, auth_headers, test_quiz, 9, started_at=started_at)
    _submit(client, auth_headers, test_quiz, 10)
    _submit(client, user2_headers, test_quiz, 5)

    res = client.get(f"/admin/quizzes/{test_quiz.id}/analytics", headers=admin_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["total_attempts"] == 3
    assert body["passed_attempts"] == 2
    assert body["pass_rate"] == 66.7
    assert body["average_score"] == 80.0
    assert body["unique_users"] == 2
    assert body["first_attempt_pass_rate"] == 50.0
    assert body["average_time_seconds"] is not None

    last_question = body["questions"][-1]
    assert last_question["times_answered"] == 3
    assert last_question["times_correct"] == 1
    assert last_question["success_rate"] == 33.3


def test_quiz_analytics_requires_admin(client, auth_headers, test_quiz):
    res = client.get(f"/admin/quizzes/{test_quiz.id}/analytics", headers=auth_headers)
    assert res.status_code == 403
