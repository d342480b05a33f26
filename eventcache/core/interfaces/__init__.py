from .cache import KeyValueBackend, ManagedBackend, OriginFetcher, Serializer

__all__ = ["KeyValueBackend", "ManagedBackend", "OriginFetcher", "Serializer"]
