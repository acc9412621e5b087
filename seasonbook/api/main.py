"""
Main FastAPI application for the seasonbook engine.

The API exposes the same operations as the CLI:
- Athletes and their cumulative statistics
- Season lifecycle (create, archive, reactivate, delete, status)
- Game creation and ending (which drives statistics aggregation)
- Maintenance jobs (season migration, consistency repair, CSV export)

Run with:
    uvicorn seasonbook.api.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from .routers import athletes

app = FastAPI(
    title="Seasonbook API",
    description="Season lifecycle and statistics aggregation for athlete journals",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict to known front-end origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Basic API information and a link to the interactive docs."""
    return {
        "message": "Seasonbook API",
        "version": "0.1.0",
        "docs": f"http://{settings.api_host}:{settings.api_port}/docs",
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "seasonbook",
        "fall_start_month": settings.fall_start_month,
        "default_sport": settings.default_sport,
    }


app.include_router(athletes.router, prefix="/api/athletes", tags=["athletes"])
