"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the routing core and external
adapters. They enable dependency injection and make the system testable.
"""

from .graph import RouteSolverPort
from .rendering import FlowRendererPort

__all__ = [
    "RouteSolverPort",
    "FlowRendererPort",
]
