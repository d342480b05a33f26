"""
Infrastructure Module

Cache coordinator, key-value backends and monitoring.
"""
