"""
Web API Router - routes for the writing coach web app.
"""

from fastapi import APIRouter
from . import analyze, topics, user_counter

router = APIRouter()

router.include_router(analyze.router, tags=["analyze"])
router.include_router(topics.router, tags=["topics"])
router.include_router(user_counter.router, tags=["user-counter"])
