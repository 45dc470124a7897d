"""
Health check and system status endpoints
"""
from fastapi import APIRouter, Request

from guessmon import __version__


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check(request: Request):
    """Health check endpoint"""
    catalog = request.app.state.catalog
    return {
        "status": "ok",
        "message": "Guessmon - Creature Quiz",
        "version": __version__,
        "total_creatures": len(catalog),
        "total_cohorts": len(catalog.cohorts),
        "sync": request.app.state.sync_status.state,
    }
