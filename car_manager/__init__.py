"""
Car Manager Package.

A small web application for keeping a personal list of cars (brand, model,
year, price) with add, edit, delete and brand filtering, persisted to a
key-value storage slot.
"""

__version__ = "1.0.0"
__description__ = "Personal car list manager"

__all__ = [
    "__version__",
]
