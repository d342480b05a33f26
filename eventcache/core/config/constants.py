"""
System Constants and Enumerations

This module defines the constants shared by the cache layer: stage
identifiers for structured logging, cache TTLs per resource type, key
segments and HTTP header names.

Author: Platform Team
Date: 2025-12-05
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache coordinator stages.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    Every log line emitted by the cache layer carries one of these so a
    request can be followed through liveness check, read, coalescing,
    origin fetch and write without reading the code.
    """

    BACKEND_LIVENESS = "C.0_BACKEND_LIVENESS"
    CACHE_READ = "C.1_CACHE_READ"
    INFLIGHT = "C.2_INFLIGHT"
    ORIGIN_FETCH = "C.3_ORIGIN_FETCH"
    CACHE_WRITE = "C.4_CACHE_WRITE"
    INVALIDATION = "C.5_INVALIDATION"
    WARMING = "C.6_WARMING"

    # Cross-cutting
    REDIS = "R_REDIS"
    STARTUP = "0.0_STARTUP"
    SHUTDOWN = "9.0_SHUTDOWN"


# ============================================================================
# Cache TTLs (seconds) per resource type
# ============================================================================


class CacheTTL:
    """
    TTLs used by the call sites of the event platform.

    Leaderboards change with every submitted answer, event metadata is
    close to static.
    """

    USER = 60
    LEADERBOARD = 30
    EVENT = 1800
    EVENTS_LIST = 3600
    ROUNDS = 900
    QUESTIONS = 300
    PARTICIPANT = 600
    PARTICIPANT_CREDENTIAL = 300
    REGISTRATIONS = 300
    COLLEGES = 600


DEFAULT_TTL = 3600

# Largest serialized value written to the backend (1 MiB)
MAX_OBJECT_SIZE = 1024 * 1024

# Number of recent events cached by the startup warm-up
WARMUP_EVENT_LIMIT = 50

# Redis DEL batch size used by pattern invalidation
DELETE_BATCH_SIZE = 500

# ============================================================================
# Key Segments
# ============================================================================

KEY_SEPARATOR = ":"

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_ADMIN_TOKEN = "X-Admin-Token"
