"""Domain entities."""

from .sample import Sample

__all__ = ["Sample"]
