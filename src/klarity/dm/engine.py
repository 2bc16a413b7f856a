"""Orchestration graph: runs one conversation turn over named nodes.

Nodes are registered with a router each. At run time every node is wrapped
so that it never raises into LangGraph:

    handler(state) ──> update ──> merge ──> router(merged) ──> Command(goto)

A handler exception or timeout becomes ``error`` in the update before its
router runs, so routers only ever inspect state. The error node is a dead
end wired straight to END.
"""

import asyncio
import logging
from typing import Any

from langgraph.errors import GraphRecursionError
from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph
from langgraph.types import Command

from klarity.core.errors import GraphBuildError
from klarity.core.state import merge_state
from klarity.core.types import BookingState, NodeHandler, Route, Router

logger = logging.getLogger(__name__)

TERMINAL = END


class OrchestrationGraph:
    """Registry of nodes and routers compiled into a LangGraph state machine."""

    def __init__(self, node_timeout: float | None = None, max_steps: int = 25) -> None:
        if max_steps < 1:
            raise GraphBuildError("max_steps must be at least 1")
        self.node_timeout = node_timeout
        self.max_steps = max_steps
        self._nodes: dict[str, NodeHandler] = {}
        self._routers: dict[str, Router] = {}
        self._destinations: dict[str, tuple[str, ...]] = {}
        self._entry: str | None = None
        self._error_node: str | None = None
        self._compiled: CompiledStateGraph | None = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_node(self, name: str, handler: NodeHandler) -> None:
        """Register a step. Handlers are the only place side effects occur."""
        if name in self._nodes:
            raise GraphBuildError(f"Node '{name}' is already registered")
        if name in (START, END):
            raise GraphBuildError(f"'{name}' is a reserved node name")
        self._nodes[name] = handler
        self._compiled = None

    def set_entry_node(self, name: str) -> None:
        """Designate the node every turn starts at."""
        if name not in self._nodes:
            raise GraphBuildError(f"Entry node '{name}' is not registered")
        self._entry = name
        self._compiled = None

    def set_error_node(self, name: str, handler: NodeHandler) -> None:
        """Register the error terminal: it runs once and ends the turn."""
        if self._error_node is not None:
            raise GraphBuildError(f"Error node already set to '{self._error_node}'")
        self.register_node(name, handler)
        self._error_node = name

    def register_router(
        self,
        name: str,
        router: Router,
        destinations: tuple[str, ...] | None = None,
    ) -> None:
        """Bind a node to its router.

        Args:
            name: Registered node name
            router: Function from post-node state to a ``Route``
            destinations: Possible targets, used only when drawing the graph
        """
        if name not in self._nodes:
            raise GraphBuildError(f"Cannot route unknown node '{name}'")
        if name == self._error_node:
            raise GraphBuildError(f"Error node '{name}' is terminal and takes no router")
        if name in self._routers:
            raise GraphBuildError(f"Node '{name}' already has a router")
        self._routers[name] = router
        if destinations:
            self._destinations[name] = tuple(destinations)
        self._compiled = None

    @property
    def entry_node(self) -> str | None:
        return self._entry

    @property
    def error_node(self) -> str | None:
        return self._error_node

    @property
    def node_names(self) -> list[str]:
        return list(self._nodes)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check the wiring before compiling.

        Raises:
            GraphBuildError: If the entry or error node is missing, or a
                non-terminal node has no router.
        """
        if self._entry is None:
            raise GraphBuildError("Entry node is not set")
        if self._error_node is None:
            raise GraphBuildError("Error node is not set")
        if self._entry == self._error_node:
            raise GraphBuildError("Entry node cannot be the error node")
        missing = [n for n in self._nodes if n != self._error_node and n not in self._routers]
        if missing:
            raise GraphBuildError(f"Nodes without a router: {', '.join(missing)}")
        for name, targets in self._destinations.items():
            unknown = [t for t in targets if t != END and t not in self._nodes]
            if unknown:
                raise GraphBuildError(
                    f"Router for '{name}' declares unknown targets: {', '.join(unknown)}"
                )

    def compile(self) -> CompiledStateGraph:
        """Validate and compile into a LangGraph graph (cached)."""
        if self._compiled is not None:
            return self._compiled

        self.validate()
        assert self._entry is not None and self._error_node is not None

        builder: StateGraph = StateGraph(BookingState)
        for name, handler in self._nodes.items():
            if name == self._error_node:
                builder.add_node(name, self._wrap_terminal(name, handler))
            else:
                destinations = self._destinations.get(name)
                if destinations:
                    builder.add_node(
                        name, self._wrap(name, handler), destinations=destinations
                    )
                else:
                    builder.add_node(name, self._wrap(name, handler))

        builder.add_edge(START, self._entry)
        builder.add_edge(self._error_node, END)

        self._compiled = builder.compile()
        logger.info(f"Compiled graph with {len(self._nodes)} nodes, entry '{self._entry}'")
        return self._compiled

    def render_mermaid(self) -> str:
        """Mermaid diagram of the compiled graph."""
        return self.compile().get_graph().draw_mermaid()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, initial_state: BookingState) -> BookingState:
        """Execute one turn and return the final state."""
        graph = self.compile()
        # Node visits are capped by step_count; this only guards the engine itself.
        config = {"recursion_limit": self.max_steps + 5}
        try:
            result = await graph.ainvoke(initial_state, config=config)
        except GraphRecursionError:
            logger.error(f"Turn hit the recursion limit ({self.max_steps + 5})")
            return merge_state(
                initial_state, {"error": f"Turn exceeded {self.max_steps} steps."}
            )
        return result  # type: ignore[return-value]

    async def _call(self, name: str, handler: NodeHandler, state: BookingState) -> dict[str, Any]:
        """Run a handler, converting failures into an ``error`` update."""
        try:
            if self.node_timeout is not None:
                update = await asyncio.wait_for(handler(state), timeout=self.node_timeout)
            else:
                update = await handler(state)
        except asyncio.TimeoutError:
            logger.error(f"Node '{name}' timed out after {self.node_timeout}s")
            return {"error": f"Step '{name}' timed out after {self.node_timeout} seconds."}
        except Exception as e:
            logger.exception(f"Node '{name}' raised {type(e).__name__}")
            return {"error": f"Step '{name}' failed: {e}"}

        if update is None:
            return {}
        if not isinstance(update, dict):
            logger.error(f"Node '{name}' returned {type(update).__name__} instead of a dict")
            return {"error": f"Step '{name}' returned an invalid update."}
        return update

    def _next_hop(self, name: str, state: BookingState) -> Route:
        """Evaluate the router and enforce target validity and the step cap."""
        assert self._error_node is not None
        router = self._routers[name]
        try:
            route = router(state)
        except Exception as e:
            logger.exception(f"Router for '{name}' raised {type(e).__name__}")
            return Route(self._error_node, f"Routing after '{name}' failed: {e}")

        if route.target != END and route.target not in self._nodes:
            logger.error(f"Router for '{name}' returned unknown node '{route.target}'")
            return Route(self._error_node, f"Routing after '{name}' chose unknown step.")

        steps = state.get("step_count") or 0
        if route.target not in (END, self._error_node) and steps >= self.max_steps:
            logger.error(f"Turn exceeded {self.max_steps} steps at '{name}'")
            return Route(self._error_node, f"Turn exceeded {self.max_steps} steps.")
        return route

    def _wrap(self, name: str, handler: NodeHandler):
        async def node(state: BookingState) -> Command:
            update = await self._call(name, handler, state)
            update["step_count"] = (state.get("step_count") or 0) + 1

            merged = merge_state(state, update)
            route = self._next_hop(name, merged)
            if route.error and not merged.get("error"):
                update["error"] = route.error

            logger.debug(f"'{name}' -> '{route.target}'")
            return Command(update=update, goto=route.target)

        node.__name__ = name
        return node

    def _wrap_terminal(self, name: str, handler: NodeHandler):
        async def node(state: BookingState) -> dict[str, Any]:
            update = await self._call(name, handler, state)
            # error is write-once; never let the terminal replace it
            update.pop("error", None)
            update["step_count"] = (state.get("step_count") or 0) + 1
            return update

        node.__name__ = name
        return node
