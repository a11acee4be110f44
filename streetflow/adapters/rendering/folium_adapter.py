"""Folium flow map renderer adapter.

Draws an exported flow network as polylines whose weight scales with
flow. Only meaningful for the geographic reference (lon, lat).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ...config import RenderingConfig, get_config
from ...domain.errors import RenderingError
from ...domain.models import ExportedEdge


@dataclass
class FoliumFlowRenderer:
    """Folium-based interactive flow map renderer.

    Implements FlowRendererPort.
    """

    config: RenderingConfig = field(default_factory=lambda: get_config().rendering)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def line_weight(self, flow: float, max_flow: float) -> float:
        """Scale a flow linearly into the configured line weight range."""
        low, high = self.config.min_line_weight, self.config.max_line_weight
        if max_flow <= 0:
            return low
        return low + (high - low) * (flow / max_flow)

    def render(
        self,
        edges: Sequence[ExportedEdge],
        output_path: Path,
    ) -> Path:
        """Render a flow network on a map and save to file.

        Raises:
            RenderingError: If there is nothing to draw or rendering fails.
        """
        if not edges:
            raise RenderingError(
                "Cannot render empty flow network",
                output_path=str(output_path),
                renderer_type="folium",
            )

        self._logger.info(
            "Rendering flow map",
            extra={"edges": len(edges), "output_path": str(output_path)},
        )

        try:
            import folium

            lats = [p[1] for e in edges for p in e.geometry]
            lons = [p[0] for e in edges for p in e.geometry]
            center = [sum(lats) / len(lats), sum(lons) / len(lons)]

            m = folium.Map(
                location=center,
                zoom_start=self.config.zoom_start,
                tiles=self.config.tiles,
                control_scale=True,
            )

            max_flow = max(e.flow for e in edges)
            for e in edges:
                if e.flow <= 0:
                    continue
                folium.PolyLine(
                    [[p[1], p[0]] for p in e.geometry],
                    weight=self.line_weight(e.flow, max_flow),
                    color=self.config.color,
                    opacity=0.8,
                    tooltip=f"flow: {e.flow:g}",
                ).add_to(m)

            m.fit_bounds([[min(lats), min(lons)], [max(lats), max(lons)]])

            output_path.parent.mkdir(parents=True, exist_ok=True)
            m.save(str(output_path))

            self._logger.info(
                "Map rendered successfully",
                extra={"output_path": str(output_path)},
            )
            return output_path

        except ImportError as e:
            raise RenderingError(
                "Folium not installed",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )
        except Exception as e:
            self._logger.error(
                "Map rendering failed",
                extra={"error": str(e), "output_path": str(output_path)},
            )
            raise RenderingError(
                f"Map rendering failed: {e}",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )
