# API module exports
from workshop_timer.api import health
from workshop_timer.api.base import api_router

__all__ = ["health", "api_router"]
