from filmacademy.core.app_factory import create_app


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["message"].endswith("API")


def test_livez(client):
    res = client.get("/livez")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_readyz_reports_database(client):
    res = client.get("/readyz")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ready"
    assert body["details"]["database"] == "connected"


def test_request_id_is_generated(client):
    res = client.get("/livez")
    assert res.headers.get("X-Request-ID")


def test_request_id_is_echoed(client):
    res = client.get("/livez", headers={"X-Request-ID": "req-123"})
    assert res.headers["X-Request-ID"] == "req-123"


def test_validation_error_envelope(client):
    res = client.post("/register", json={"email": "not-an-email", "password": "x"})
    assert res.status_code == 422
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "validation_error"
    fields = {error["field"] for error in body["error"]["details"]["errors"]}
    assert {"email", "password"} <= fields
    assert body["path"] == "/register"
    assert "timestamp" in body


def test_not_found_envelope(client):
    res = client.get("/courses/999999")
    assert res.status_code == 404
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "resource_not_found"
    assert body["error"]["message"] == "Course not found"
    assert body["error"]["details"] == {"identifier": "999999"}


def test_create_app_registers_academy_routes():
    app = create_app()
    paths = set(app.openapi()["paths"])
    assert "/courses" in paths
    assert "/verify-certificate/{certificate_number}" in paths
    assert "/quizzes/{quiz_id}/attempts" in paths
    assert "/ai/assistants/{kind}/chat" in paths
    assert app.state.environment == "test"


def test_models_package_exposes_base_with_registered_tables():
    import filmacademy.models as models_package
    from filmacademy.core.database import Base
    from filmacademy.models import registry

    assert models_package.__all__ == ["Base"]
    assert models_package.Base is Base
    assert registry.DiscussionReply.__table__.name in Base.metadata.tables
    assert {
        "users",
        "academy_courses",
        "user_course_progress",
        "user_certifications",
        "course_quizzes",
        "quiz_questions",
        "user_quiz_attempts",
        "course_discussions",
        "discussion_replies",
    } <= set(Base.metadata.tables)
