"""
Admin API Models
================

Request and response models for the cache administration endpoints.

Response models give the admin routes:
1. **Validation**: outgoing data is checked against the declared shape
2. **Documentation**: the OpenAPI schema at /docs shows every field
3. **Contract Enforcement**: accidental shape changes fail loudly
"""

from pydantic import BaseModel, Field, model_validator

# ============================================================================
# CACHE STATISTICS
# ============================================================================


class CacheStatsResponse(BaseModel):
    """
    Snapshot of the cache coordinator counters.

    Counters are cumulative since process start; reading them does not
    reset anything.
    """

    hits: int = Field(..., ge=0, description="Lookups served from the cache")
    misses: int = Field(..., ge=0, description="Lookups that went to the origin")
    total_requests: int = Field(..., ge=0, description="hits + misses")
    hit_rate: float = Field(..., ge=0.0, le=1.0, description="hits / (hits + misses)")
    hit_rate_pct: str = Field(..., description="Hit rate formatted as a percentage, e.g. '66.67%'")
    pending_requests: int = Field(..., ge=0, description="Origin fetches currently in flight")
    oversized_skips: int = Field(..., ge=0, description="Values not cached because of the size limit")


# ============================================================================
# INVALIDATION
# ============================================================================


class InvalidateRequest(BaseModel):
    """
    Invalidate a single key or every key matching a glob pattern.

    Exactly one of key / pattern must be given.

    Example:
        {"pattern": "leaderboard:*"}
    """

    key: str | None = Field(default=None, min_length=1, description="Exact cache key")
    pattern: str | None = Field(default=None, min_length=1, description="Glob pattern (*, ?, [...])")

    @model_validator(mode="after")
    def exactly_one_target(self) -> "InvalidateRequest":
        if (self.key is None) == (self.pattern is None):
            raise ValueError("provide exactly one of 'key' or 'pattern'")
        return self


class InvalidateResponse(BaseModel):
    status: str = "invalidated"
    key: str | None = None
    pattern: str | None = None
    deleted: int | None = Field(
        default=None, description="Keys removed by a pattern invalidation (None for a single key)"
    )


class FlushResponse(BaseModel):
    status: str = "flushed"
