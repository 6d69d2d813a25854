"""
Repository layer - Data access abstractions.

This layer provides the key-value storage backends and the car repository
that loads and saves the whole collection through a single storage slot.
"""

from .car_repository import CarRepository
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = ["CarRepository", "JsonFileStorage", "KeyValueStorage", "MemoryStorage"]
