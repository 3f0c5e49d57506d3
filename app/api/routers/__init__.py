"""
app/api/routers package marker.
"""

from app.api.routers.calculator import router as calculator_router
from app.api.routers.csv_ingestion import router as csv_ingestion_router
from app.api.routers.mapping import router as mapping_router
from app.api.routers.orders import router as orders_router
from app.api.routers.rollups import router as rollups_router

__all__ = [
    "calculator_router",
    "csv_ingestion_router",
    "mapping_router",
    "orders_router",
    "rollups_router",
]
