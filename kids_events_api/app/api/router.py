"""
Top‑level API router.

Aggregates the domain routers under the ``/api`` prefix applied in
``main``.  New domains get their own module in ``endpoints`` and are
included here.
"""

from fastapi import APIRouter

from .endpoints import events

router = APIRouter()

router.include_router(events.router, prefix="/events", tags=["events"])
