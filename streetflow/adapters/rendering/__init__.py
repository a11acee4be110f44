"""Rendering adapters - Implementations of the flow rendering port."""

from .folium_adapter import FoliumFlowRenderer

__all__ = ["FoliumFlowRenderer"]
