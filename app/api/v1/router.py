# ============================================================================
# Main API Router
# ============================================================================
from fastapi import APIRouter

from app.api.v1 import revision

api_router = APIRouter()

# Revision Mode: generate, answer, finish, saved sessions and stats
api_router.include_router(revision.router)
