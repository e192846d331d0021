"""
API v1 main router
"""
from fastapi import APIRouter

from hostel_complaints.api.v1.endpoints import (
    auth,
    users,
    classify,
    drafts,
    complaints,
    admin
)

api_router = APIRouter()

# Authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"]
)

# Student profile
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"]
)

# One-shot AI classification
api_router.include_router(
    classify.router,
    prefix="/classify",
    tags=["Classification"]
)

# Complaint drafts (submit screen)
api_router.include_router(
    drafts.router,
    prefix="/drafts",
    tags=["Drafts"]
)

# Complaints (students)
api_router.include_router(
    complaints.router,
    prefix="/complaints",
    tags=["Complaints"]
)

# Staff panel
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"]
)
