"""Gbaka Guides geo-proxy gateway (Mapbox / OpenStreetMap)."""

__version__ = "1.0.0"
