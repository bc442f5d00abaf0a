"""Centralized API router registration with feature grouping.

Groups:
- Accounts: auth, user.
- Learning: courses, progress, quizzes, certifications, public verification.
- Community: discussions.
- Admin authoring/moderation and AI production tools.
"""

from fastapi import APIRouter

from filmacademy.routers import (
    admin,
    ai_tools,
    auth,
    certifications,
    courses,
    discussions,
    progress,
    quizzes,
    user,
    verification,
)

api_router = APIRouter()

# Accounts
api_router.include_router(auth.router)
api_router.include_router(user.router)

# Learning
api_router.include_router(courses.router)
api_router.include_router(progress.router)
api_router.include_router(quizzes.router)
api_router.include_router(certifications.router)
api_router.include_router(verification.router)

# Community
api_router.include_router(discussions.router)

# Admin and tools
api_router.include_router(admin.router)
api_router.include_router(ai_tools.router)
