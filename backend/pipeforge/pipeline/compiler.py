"""Pipeline Compiler - execution ordering and step rendering.

Ordering is a deterministic Kahn's algorithm. Nodes that cannot be
resolved (cycles, or anything downstream of one) are appended after the
resolved prefix in input order, so a badly wired canvas still compiles.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence

from pipeforge.pipeline.catalog import renderer_for
from pipeforge.pipeline.models import CompiledPipeline, PipelineGraph, PipelineNode, StepBlock

logger = logging.getLogger(__name__)


class PipelineCompiler:
    """Compiles a pipeline graph into ordered workflow step blocks."""

    def _resolve(self, graph: PipelineGraph) -> tuple[list[PipelineNode], list[PipelineNode]]:
        """Split nodes into the topologically resolved prefix and the remainder."""
        known = graph.node_ids()
        adjacency: dict[str, list[str]] = defaultdict(list)  # node -> dependents
        in_degree = {node.id: 0 for node in graph.nodes}
        seen_edges: set[tuple[str, str]] = set()

        for edge in graph.edges:
            if edge.source not in known or edge.target not in known:
                logger.debug(f"Ignoring dangling edge {edge.source} -> {edge.target}")
                continue
            if edge.is_self_loop:
                logger.warning(f"Ignoring self-loop on {edge.source}", extra={"node_id": edge.source})
                continue
            pair = (edge.source, edge.target)
            if pair in seen_edges:
                continue
            seen_edges.add(pair)
            adjacency[edge.source].append(edge.target)
            in_degree[edge.target] += 1

        by_id = {node.id: node for node in graph.nodes}
        queue = [node.id for node in graph.nodes if in_degree[node.id] == 0]
        resolved: list[PipelineNode] = []
        visited: set[str] = set()

        while queue:
            node_id = queue.pop(0)
            resolved.append(by_id[node_id])
            visited.add(node_id)

            for dependent in adjacency[node_id]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        remainder = [node for node in graph.nodes if node.id not in visited]
        if remainder:
            logger.warning(
                f"Pipeline '{graph.name or 'unnamed'}' has a cycle; "
                f"appending {len(remainder)} unresolved step(s) in input order"
            )
        return resolved, remainder

    def order(self, graph: PipelineGraph) -> list[PipelineNode]:
        """Execution order: every node exactly once, dependencies first."""
        resolved, remainder = self._resolve(graph)
        return resolved + remainder

    def render(self, ordered_nodes: Sequence[PipelineNode], stack_hint: str) -> list[StepBlock]:
        """Render nodes, in the given order, into step blocks."""
        blocks: list[StepBlock] = []
        for node in ordered_nodes:
            kind = node.kind
            render = renderer_for(kind)
            for text in render(node, stack_hint):
                blocks.append(StepBlock(node_id=node.id, kind=kind, text=text))
        return blocks

    def compile(self, graph: PipelineGraph, stack_hint: str) -> CompiledPipeline:
        """Order and render a graph in one pass."""
        resolved, remainder = self._resolve(graph)
        ordered = resolved + remainder
        blocks = self.render(ordered, stack_hint)
        logger.info(
            f"Compiled {len(ordered)} node(s) into {len(blocks)} step block(s)",
            extra={"stack": stack_hint},
        )
        return CompiledPipeline(
            order=ordered,
            blocks=blocks,
            unresolved=[node.id for node in remainder],
        )


pipeline_compiler = PipelineCompiler()
