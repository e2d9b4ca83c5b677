"""
Adapters layer - Participant directory and meeting store implementations.
"""

from .http_store import HttpMeetingStore
from .json_store import JsonFileStore
from .memory_store import InMemoryStore, seed_sample_data

__all__ = ["HttpMeetingStore", "InMemoryStore", "JsonFileStore", "seed_sample_data"]
