"""
Placeholder for integration tests.

Integration tests will test component interactions:
- Redis connectivity
- Multi-tier caching (L1 + L2)
- Provider integration (with mocked LLM APIs)
- Circuit breaker coordination

These tests require external dependencies (Redis, etc.) and run slower than unit tests.
"""
