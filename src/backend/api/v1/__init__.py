"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.auth import router as auth_router
from api.v1.leaderboard import router as leaderboard_router
from api.v1.questions import router as questions_router
from api.v1.users import router as users_router
from api.v1.votes import router as votes_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(questions_router, prefix="/questions", tags=["Questions"])
router.include_router(votes_router, prefix="/questions", tags=["Votes"])
router.include_router(leaderboard_router, prefix="/leaderboard", tags=["Leaderboard"])
