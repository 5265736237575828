"""Centralized v1 API router."""

from fastapi import APIRouter

from flowmarine.modules.rfq.router import router as rfq_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(rfq_router)
