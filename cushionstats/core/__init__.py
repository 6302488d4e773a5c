"""Core data model shared across the analysis stages."""

from cushionstats.core import entities

__all__ = ["entities"]
