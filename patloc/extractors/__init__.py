"""Extractors for the bibliographic input tables."""

from .patstat import PatstatExtractor, PatstatTables


__all__ = ["PatstatExtractor", "PatstatTables"]
