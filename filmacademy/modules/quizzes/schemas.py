"""Pydantic schemas for quizzes, questions and attempts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"


class QuizCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)
    time_limit_minutes: Optional[int] = Field(default=None, ge=1)
    max_attempts: Optional[int] = Field(default=None, ge=1)
    is_required_for_certification: bool = False
    order_index: int = 0


class QuizOut(QuizCreate):
    id: int
    course_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuestionCreate(BaseModel):
    question_text: str = Field(min_length=1)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: List[str] = Field(default_factory=list)
    correct_answer: str = Field(min_length=1)
    explanation: Optional[str] = None
    points: int = Field(default=1, ge=1)
    order_index: int = 0

    @model_validator(mode="after")
    def _answer_is_an_option(self):
        if self.question_type == QuestionType.TRUE_FALSE and not self.options:
            self.options = ["True", "False"]
        if self.options and self.correct_answer not in self.options:
            raise ValueError("correct_answer must be one of the options")
        return self


class QuestionPublic(BaseModel):
    """Question as shown to learners: no answer key."""

    id: int
    quiz_id: int
    question_text: str
    question_type: QuestionType
    options: List[str]
    points: int
    order_index: int

    model_config = ConfigDict(from_attributes=True)


class QuestionOut(QuestionPublic):
    correct_answer: str
    explanation: Optional[str] = None


class AttemptSubmit(BaseModel):
    answers: Dict[int, str] = Field(default_factory=dict)
    started_at: Optional[datetime] = None


class QuestionFeedback(BaseModel):
    question_id: int
    selected_answer: Optional[str] = None
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None


class AttemptOut(BaseModel):
    id: int
    user_id: int
    quiz_id: int
    score: int
    total_questions: int
    answers: Dict[str, str]
    passed: bool
    time_taken_seconds: Optional[int] = None
    attempt_number: int
    completed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttemptResult(AttemptOut):
    correct_count: int
    passing_score: int
    feedback: List[QuestionFeedback]


class QuestionStats(BaseModel):
    question_id: int
    question_text: str
    times_answered: int
    times_correct: int
    success_rate: float


class QuizAnalytics(BaseModel):
    quiz_id: int
    total_attempts: int
    passed_attempts: int
    pass_rate: float
    average_score: float
    average_time_seconds: Optional[float] = None
    unique_users: int
    first_attempt_pass_rate: float
    questions: List[QuestionStats]
