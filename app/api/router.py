from fastapi import APIRouter

from app.domains.visit_scheduling.api import routes as scheduling

api_router = APIRouter()

# API routes (all have /api/v1 prefix from app_factory.py)
api_router.include_router(scheduling.router)
