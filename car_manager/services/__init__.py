"""
Business logic service layer.

Owns the in-memory car collection and the operations that change it.
"""

from .car_service import CarCollectionManager, IdGenerator

__all__ = ["CarCollectionManager", "IdGenerator"]
