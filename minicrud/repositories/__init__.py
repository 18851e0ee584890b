"""
Persistence adapters.

Services depend on ``JsonCollection`` instead of touching the JSON files
directly; swapping the storage later only touches this package.
"""

from minicrud.repositories.json_storage import JsonCollection

__all__ = ["JsonCollection"]
