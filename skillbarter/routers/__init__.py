"""Routers package — HTTP route handlers."""
from skillbarter.routers import barters, catalog, misc, profile, requests

__all__ = [
    "barters",
    "catalog",
    "misc",
    "profile",
    "requests",
]
