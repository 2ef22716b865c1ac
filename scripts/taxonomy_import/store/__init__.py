"""
Almacenes de taxonomía.
"""

from .base import TaxonomyStore
from .memory import MemoryTaxonomyStore
from .postgres import PostgresTaxonomyStore

__all__ = ["TaxonomyStore", "MemoryTaxonomyStore", "PostgresTaxonomyStore"]
