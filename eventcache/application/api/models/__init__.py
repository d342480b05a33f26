from .admin import CacheStatsResponse, FlushResponse, InvalidateRequest, InvalidateResponse

__all__ = ["CacheStatsResponse", "FlushResponse", "InvalidateRequest", "InvalidateResponse"]
