"""
app/api/routers package marker.
"""

from app.api.routers.review_ingestion import router as review_ingestion_router

__all__ = [
    "review_ingestion_router",
]
