"""Longform Engine - chunked long-video rendering and adaptive generation routing."""

__version__ = "0.1.0"
