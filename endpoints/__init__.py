from __future__ import annotations

from .data_endpoints import get_database, reset_database, router

__all__ = ["router", "get_database", "reset_database"]
