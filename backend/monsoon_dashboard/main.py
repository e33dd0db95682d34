"""
Monsoon Dashboard: FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from monsoon_dashboard.api.router import router
from monsoon_dashboard.config import CORS_ORIGINS

app = FastAPI(
    title="Monsoon Dashboard API",
    description="Crop calendars and monsoon rainfall statistics for India",
    version="0.1.0",
)

# CORS: allow local frontend dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "monsoon-dashboard"}
