"""
Top-level API router that aggregates all sub-routers.
"""

from fastapi import APIRouter

from monsoon_dashboard.api.rainfall import router as rainfall_router
from monsoon_dashboard.api.monsoon_figures import router as monsoon_figures_router
from monsoon_dashboard.api.crop_data import router as crop_data_router

router = APIRouter()
router.include_router(rainfall_router)
router.include_router(monsoon_figures_router)
router.include_router(crop_data_router)
