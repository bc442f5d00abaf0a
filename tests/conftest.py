# ruff: noqa: E402
import os
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

# Set testing environment flags before importing the app or settings
_TEST_DB_PATH = Path(__file__).resolve().parent / "test.db"
os.environ["APP_ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", f"sqlite:///{_TEST_DB_PATH}")
os.environ["LOG_DIR"] = ""
os.environ.pop("AI_GATEWAY_API_KEY", None)

from filmacademy.core.config import settings
from filmacademy.core.database import Base, get_db
from filmacademy.main import app
from filmacademy.models import registry as models
from filmacademy.oauth2 import create_access_token


class AttrDict(dict):
    """Dict with attribute-style access for fixtures."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError as exc:
            raise AttributeError(item) from exc


test_db_url = settings.get_database_url(use_test=True)

# Safety: never run tests against a non-test Postgres database.
parsed_url = make_url(test_db_url)
if parsed_url.drivername.startswith("postgresql") and not (
    parsed_url.database or ""
).endswith("_test"):
    raise RuntimeError(
        f"Refusing to run tests against non-test database '{parsed_url.database}'."
    )


def _init_test_engine():
    engine_kwargs = {"echo": False}
    if parsed_url.drivername.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    test_engine = create_engine(test_db_url, **engine_kwargs)

    if test_engine.dialect.name == "sqlite":

        @event.listens_for(test_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return test_engine


engine = _init_test_engine()
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _clear_tables():
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


# Autouse cleanup to keep DB isolated across all tests, including those that
# do not explicitly request the session fixture.
@pytest.fixture(autouse=True, scope="function")
def _clean_db_between_tests():
    _clear_tables()
    yield


@pytest.fixture(scope="function")
def session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(session):
    def override_get_db():
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


def _register(client, email, password="password123", **names):
    res = client.post("/register", json={"email": email, "password": password, **names})
    assert res.status_code == 201
    new_user = res.json()
    new_user["password"] = password
    return AttrDict(new_user)


@pytest.fixture(scope="function")
def test_user(client):
    return _register(client, "maya@example.com", first_name="Maya", last_name="Deren")


@pytest.fixture(scope="function")
def test_user2(client):
    return _register(client, "agnes@example.com", first_name="Agnes", last_name="Varda")


@pytest.fixture(scope="function")
def admin_user(client):
    user = _register(client, "admin@example.com")
    with TestingSessionLocal() as db:
        db.query(models.User).filter(models.User.id == user["id"]).update(
            {"role": models.UserRole.ADMIN}
        )
        db.commit()
    user["role"] = "admin"
    return user


@pytest.fixture(scope="function")
def token(test_user):
    return create_access_token({"user_id": test_user["id"]})


@pytest.fixture(scope="function")
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def user2_headers(test_user2):
    token = create_access_token({"user_id": test_user2["id"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    token = create_access_token({"user_id": admin_user["id"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def authorized_client(client, token):
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client


def _add_course(session, **overrides):
    data = {
        "title": "Directing Actors",
        "description": "Blocking, rehearsal and performance notes.",
        "category": "Production",
        "instructor": "Sidney Lumet",
        "level": "intermediate",
        "duration_hours": 4.5,
        "order_index": 1,
    }
    data.update(overrides)
    course = models.Course(**data)
    session.add(course)
    session.commit()
    session.refresh(course)
    return AttrDict(
        id=course.id,
        title=course.title,
        category=course.category,
        duration_hours=course.duration_hours,
    )


@pytest.fixture(scope="function")
def make_course(session):
    def factory(**overrides):
        return _add_course(session, **overrides)

    return factory


@pytest.fixture(scope="function")
def test_course(make_course):
    return make_course()


@pytest.fixture(scope="function")
def test_quiz(session, test_course):
    """A ten-question multiple choice quiz; the right answer is always "B"."""
    quiz = models.CourseQuiz(
        course_id=test_course["id"],
        title="Directing fundamentals",
        passing_score=None,
        order_index=1,
    )
    session.add(quiz)
    session.commit()
    session.refresh(quiz)

    questions = [
        models.QuizQuestion(
            quiz_id=quiz.id,
            question_text=f"Question {index}",
            question_type="multiple_choice",
            options=["A", "B", "C", "D"],
            correct_answer="B",
            explanation=f"Because of rule {index}",
            order_index=index,
        )
        for index in range(1, 11)
    ]
    session.add_all(questions)
    session.commit()
    return AttrDict(
        id=quiz.id,
        course_id=test_course["id"],
        question_ids=[question.id for question in questions],
    )
