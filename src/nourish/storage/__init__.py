"""Persistence boundary for meal settings."""
from nourish.storage.kv import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "JsonFileKeyValueStore"]
