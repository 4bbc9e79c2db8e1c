# API module exports
from labflow.api import health
from labflow.api.base import api_router

__all__ = ["health", "api_router"]
