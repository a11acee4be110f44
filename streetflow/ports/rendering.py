"""Rendering port - Abstraction for flow map generation.

This protocol defines the contract for drawing an exported flow
network, allowing different implementations (Folium, ...) to be used.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import ExportedEdge


class FlowRendererPort(Protocol):
    """Port for flow map rendering.

    Implementation: adapters/rendering/folium_adapter.py
    """

    def render(
        self,
        edges: Sequence[ExportedEdge],
        output_path: Path,
    ) -> Path:
        """Render a flow network on a map and save to file.

        Args:
            edges: Exported edges with geometry and flow.
            output_path: Where to save the rendered map.

        Returns:
            Path to the generated map file.
        """
        ...
