"""Wiring of the routing components.

Bindings map a type (a port Protocol or a concrete class) to a factory.
Shared bindings are built once on first resolve; the others build a new
instance per resolve. Factories may resolve their own dependencies, so
resolution holds a re-entrant lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class _Binding:
    factory: Callable[[], Any]
    shared: bool
    instance: Any = None
    built: bool = False


@dataclass
class Container:
    """Registry of component factories.

    Example:
        container = Container.create_default()
        service = container.resolve(NetworkFlowService)

        container.register(FlowRendererPort, lambda: fake_renderer)

    Attributes:
        config: Configuration the default bindings are built from
    """

    config: AppConfig = field(default_factory=get_config)
    _bindings: Dict[type[Any], _Binding] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Bind ``port_type`` to ``factory``, replacing any earlier binding."""
        with self._lock:
            self._bindings[port_type] = _Binding(factory=factory, shared=singleton)

    def resolve(self, port_type: type[Any]) -> Any:
        """Return an instance for ``port_type``.

        Raises:
            KeyError: If nothing is bound to the type.
        """
        with self._lock:
            binding = self._bindings.get(port_type)
            if binding is None:
                raise KeyError(f"Type not registered: {port_type}")
            if not binding.shared:
                return binding.factory()
            if not binding.built:
                binding.instance = binding.factory()
                binding.built = True
            return binding.instance

    def __contains__(self, port_type: object) -> bool:
        return port_type in self._bindings

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Container bound to the Dijkstra solver, numpy aggregator and folium renderer.

        Profiles from ``routing.profiles_file`` are registered on top of
        the built-in ones.
        """
        from .adapters.graph import DijkstraRouteSolver
        from .adapters.rendering import FoliumFlowRenderer
        from .flows.aggregate import FlowAggregator
        from .graph.builder import GraphBuilder
        from .graph.profiles import ProfileRegistry
        from .ports.graph import RouteSolverPort
        from .ports.rendering import FlowRendererPort
        from .services import NetworkFlowService

        config = config or get_config()
        container = cls(config=config)
        resolve = container.resolve

        def profiles() -> ProfileRegistry:
            registry = ProfileRegistry()
            if config.routing.profiles_file is not None:
                registry.load_file(config.routing.profiles_file)
            return registry

        container.register(ProfileRegistry, profiles)
        container.register(
            GraphBuilder,
            lambda: GraphBuilder(config=config.graph, profiles=resolve(ProfileRegistry)),
        )
        container.register(RouteSolverPort, DijkstraRouteSolver)
        container.register(
            FlowAggregator,
            lambda: FlowAggregator(
                max_workers=config.routing.max_workers,
                batch_size=config.routing.batch_size,
            ),
        )
        container.register(FlowRendererPort, lambda: FoliumFlowRenderer(config.rendering))

        # each service holds its own loaded network
        container.register(
            NetworkFlowService,
            lambda: NetworkFlowService(
                builder=resolve(GraphBuilder),
                route_solver=resolve(RouteSolverPort),
                aggregator=resolve(FlowAggregator),
                renderer=resolve(FlowRendererPort),
            ),
            singleton=False,
        )
        return container


_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Process-wide container, created on first use."""
    global _default_container
    with _container_lock:
        if _default_container is None:
            _default_container = Container.create_default()
        return _default_container


def reset_container() -> None:
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear()
        _default_container = None
