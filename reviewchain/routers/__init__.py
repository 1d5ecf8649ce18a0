"""
API Routers Package

Router Structure:
- reviews.py: /api/v1/reviews/* endpoints
- publication.py: /api/v1/publication/* endpoints

Each router is imported and registered in main.py.
"""

from reviewchain.routers.publication import router as publication_router
from reviewchain.routers.reviews import router as reviews_router

__all__ = [
    "reviews_router",
    "publication_router",
]
