"""
API routes serving the precomputed monsoon forecast figures (Plotly JSON).
"""

from fastapi import APIRouter, Depends, HTTPException

from monsoon_dashboard.api.dependencies import get_figure_store
from monsoon_dashboard.engine.data_files import SourceUnavailableError
from monsoon_dashboard.engine.figure_store import FigureNotFoundError, FigureStore

router = APIRouter(prefix="/api/v1", tags=["monsoon-figures"])


@router.get("/monsoon-figures")
def list_figures(store: FigureStore = Depends(get_figure_store)) -> list[str]:
    return store.available_keys()


@router.get("/monsoon-figures/{name}")
def get_figure(name: str, store: FigureStore = Depends(get_figure_store)) -> dict:
    """Return a figure document by its short key (fig1, fig2, ...)."""
    try:
        return store.load(name)
    except FigureNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Failed to load data: {e}")
