"""Hotspots: places discovery, merge and cache service for the map game."""

__version__ = "0.1.0"
