import re
from datetime import datetime

import pytest

from filmacademy.core.config import settings
from filmacademy.core.exceptions import ResourceConflictException
from filmacademy.models import registry as models
from filmacademy.modules.learning.service import CertificationService, ProgressService

CERTIFICATE_RE = re.compile(r"^FFA-\d{4}-\d{6}$")


@pytest.fixture
def enrolled(client, auth_headers, test_course):
    res = client.post(f"/courses/{test_course.id}/enroll", headers=auth_headers)
    assert res.status_code == 201
    return test_course


def _put_progress(client, headers, course_id, value):
    return client.put(
        f"/courses/{course_id}/progress",
        json={"progress_percentage": value},
        headers=headers,
    )


def test_enroll(client, auth_headers, test_course, test_user):
    res = client.post(f"/courses/{test_course.id}/enroll", headers=auth_headers)
    assert res.status_code == 201
    body = res.json()
    assert body["user_id"] == test_user.id
    assert body["status"] == "in_progress"
    assert body["progress_percentage"] == 0
    assert body["completed_at"] is None
    assert body["course"]["title"] == test_course.title


def test_enroll_twice_conflicts(client, auth_headers, enrolled):
    res = client.post(f"/courses/{enrolled.id}/enroll", headers=auth_headers)
    assert res.status_code == 409
    assert res.json()["error"]["message"] == "Already enrolled in this course"


def test_enroll_race_is_reported_as_conflict(
    client, session, auth_headers, enrolled, monkeypatch
):
    # Skip the pre-check so the unique constraint has to catch the duplicate.
    monkeypatch.setattr(ProgressService, "_find", lambda self, user_id, course_id: None)
    res = client.post(f"/courses/{enrolled.id}/enroll", headers=auth_headers)
    assert res.status_code == 409
    assert session.query(models.CourseProgress).count() == 1


def test_enroll_unknown_course(client, auth_headers):
    res = client.post("/courses/999/enroll", headers=auth_headers)
    assert res.status_code == 404


def test_enroll_requires_authentication(client, test_course):
    res = client.post(f"/courses/{test_course.id}/enroll")
    assert res.status_code == 401


def test_progress_requires_enrollment(client, auth_headers, test_course):
    res = _put_progress(client, auth_headers, test_course.id, 10)
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Enrollment not found"


@pytest.mark.parametrize("value", [-1, 100.5, 250])
def test_progress_out_of_range(client, auth_headers, enrolled, value):
    res = _put_progress(client, auth_headers, enrolled.id, value)
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "validation_error"


def test_progress_never_decreases(client, auth_headers, enrolled):
    assert _put_progress(client, auth_headers, enrolled.id, 40).json()[
        "progress_percentage"
    ] == 40
    res = _put_progress(client, auth_headers, enrolled.id, 20)
    assert res.status_code == 200
    assert res.json()["progress_percentage"] == 40
    assert res.json()["status"] == "in_progress"
    assert res.json()["certification"] is None


def test_progress_below_threshold_stays_in_progress(client, auth_headers, enrolled):
    res = _put_progress(client, auth_headers, enrolled.id, 94.9)
    assert res.json()["status"] == "in_progress"
    assert res.json()["completed_at"] is None


def test_completion_issues_certificate(client, session, auth_headers, enrolled, test_user):
    res = _put_progress(client, auth_headers, enrolled.id, 95)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "completed"
    assert body["completed_at"] is not None

    certification = body["certification"]
    assert certification is not None
    assert CERTIFICATE_RE.match(certification["certificate_number"])
    assert certification["user_id"] == test_user.id
    assert certification["skills_earned"] == [
        "Directing",
        "Cinematography",
        "On-Set Management",
    ]
    assert session.query(models.Certification).count() == 1


def test_completed_is_terminal(client, session, auth_headers, enrolled):
    first = _put_progress(client, auth_headers, enrolled.id, 100).json()

    res = _put_progress(client, auth_headers, enrolled.id, 30)
    body = res.json()
    assert body["status"] == "completed"
    assert body["progress_percentage"] == 100
    assert body["completed_at"] == first["completed_at"]
    assert body["certification"] is None
    assert session.query(models.Certification).count() == 1


def test_concurrent_completion_keeps_first_stamp(
    client, session, auth_headers, enrolled, monkeypatch
):
    first_stamp = datetime(2025, 4, 1, 9, 30)
    real_find = ProgressService._find

    def find_then_complete_elsewhere(self, user_id, course_id):
        progress = real_find(self, user_id, course_id)
        # A parallel request completes the row after this one has read it.
        self.db.query(models.CourseProgress).filter(
            models.CourseProgress.id == progress.id
        ).update(
            {
                models.CourseProgress.status: models.ProgressStatus.COMPLETED,
                models.CourseProgress.completed_at: first_stamp,
            },
            synchronize_session=False,
        )
        return progress

    monkeypatch.setattr(ProgressService, "_find", find_then_complete_elsewhere)
    res = _put_progress(client, auth_headers, enrolled.id, 100)
    assert res.status_code == 200
    assert res.json()["status"] == "completed"
    assert res.json()["certification"] is None

    progress = session.query(models.CourseProgress).one()
    assert progress.completed_at.replace(tzinfo=None) == first_stamp
    assert session.query(models.Certification).count() == 0


def test_completion_without_auto_issue(client, session, auth_headers, enrolled, monkeypatch):
    monkeypatch.setattr(settings, "CERTIFICATE_AUTO_ISSUE", False)
    res = _put_progress(client, auth_headers, enrolled.id, 100)
    assert res.json()["status"] == "completed"
    assert res.json()["certification"] is None
    assert session.query(models.Certification).count() == 0

    res = client.post(
        "/certifications/issue", json={"course_id": enrolled.id}, headers=auth_headers
    )
    assert res.status_code == 200
    assert CERTIFICATE_RE.match(res.json()["certificate_number"])


def test_failed_issuance_keeps_completion(client, session, auth_headers, enrolled, monkeypatch):
    def _fail(self, user, course, issued_at=None):
        raise ResourceConflictException("Could not allocate a unique certificate number")

    monkeypatch.setattr(CertificationService, "issue", _fail)
    res = _put_progress(client, auth_headers, enrolled.id, 100)
    assert res.status_code == 200
    assert res.json()["status"] == "completed"
    assert res.json()["certification"] is None

    progress = session.query(models.CourseProgress).one()
    assert progress.status == models.ProgressStatus.COMPLETED


def test_get_course_progress(client, auth_headers, enrolled):
    _put_progress(client, auth_headers, enrolled.id, 55)
    res = client.get(f"/courses/{enrolled.id}/progress", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["progress_percentage"] == 55


def test_progress_is_per_user(client, user2_headers, enrolled):
    res = client.get(f"/courses/{enrolled.id}/progress", headers=user2_headers)
    assert res.status_code == 404


def test_list_my_progress(client, auth_headers, make_course):
    first = make_course(title="Editing", category="Post-Production")
    second = make_course(title="Pitching", category="Funding")
    client.post(f"/courses/{first.id}/enroll", headers=auth_headers)
    client.post(f"/courses/{second.id}/enroll", headers=auth_headers)

    res = client.get("/progress/me", headers=auth_headers)
    assert res.status_code == 200
    assert {row["course"]["title"] for row in res.json()} == {"Editing", "Pitching"}
