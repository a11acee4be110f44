"""Services layer - Application orchestration.

Available services:
- NetworkFlowService: Routing and OD flow aggregation over loaded features
"""

from .network_flow import FlowNetwork, NetworkFlowService

__all__ = ["NetworkFlowService", "FlowNetwork"]
