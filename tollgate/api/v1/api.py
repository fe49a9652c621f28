"""API routes for the FastAPI application."""

from fastapi import APIRouter

from tollgate.api.v1.endpoints import billing, budget, credits, usage

api_router = APIRouter()
api_router.include_router(usage.router, prefix="/usage", tags=["usage"])
api_router.include_router(credits.router, prefix="/credits", tags=["credits"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(budget.router, prefix="/budget", tags=["budget"])
