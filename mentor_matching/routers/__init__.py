# mentor_matching/routers/__init__.py
from . import matching_router

__all__ = [
    "matching_router"
]
