"""Workflow assembly - wrap compiled step blocks in a workflow document."""

from collections.abc import Sequence

import yaml

from pipeforge.config import settings
from pipeforge.pipeline.catalog import STEP_CATALOG, default_config
from pipeforge.pipeline.models import PipelineEdge, PipelineGraph, PipelineNode, StepBlock, StepKind
from pipeforge.pipeline.steps import yaml_scalar

STEP_INDENT = "    "

# Kinds of the default pipeline, in execution order
DEFAULT_PIPELINE_KINDS = (
    StepKind.SOURCE_CHECKOUT,
    StepKind.RUNTIME_SETUP,
    StepKind.DEPENDENCY_INSTALL,
    StepKind.TEST,
    StepKind.BUILD,
    StepKind.DEPLOY,
)


def _indent(text: str, prefix: str) -> str:
    return "\n".join(prefix + line if line else line for line in text.splitlines())


def assemble_workflow(
    blocks: Sequence[StepBlock],
    name: str | None = None,
    branch: str | None = None,
    runner: str | None = None,
) -> str:
    """Build a complete workflow document around the step blocks."""
    name = name or settings.default_workflow_name
    branch = branch or settings.workflow_branch
    runner = runner or settings.workflow_runner
    branches = yaml.safe_dump([branch], default_flow_style=True, width=float("inf")).rstrip("\n")

    header = (
        f"name: {yaml_scalar(name)}\n"
        "\n"
        "on:\n"
        "  push:\n"
        f"    branches: {branches}\n"
        "  pull_request:\n"
        f"    branches: {branches}\n"
        "\n"
        "jobs:\n"
        "  pipeline:\n"
        f"    runs-on: {yaml_scalar(runner)}\n"
        "\n"
        "    steps:"
    )
    steps = "\n\n".join(_indent(block.text, STEP_INDENT) for block in blocks)
    return f"{header}\n{steps}\n" if steps else f"{header} []\n"


def default_pipeline(stack: str, name: str | None = None) -> PipelineGraph:
    """Linear checkout -> setup -> install -> test -> build -> deploy graph."""
    nodes = [
        PipelineNode(
            id=kind.value,
            type=kind.value,
            label=STEP_CATALOG[kind].label,
            config=default_config(kind, stack),
        )
        for kind in DEFAULT_PIPELINE_KINDS
    ]
    edges = [
        PipelineEdge(id=f"{a.id}->{b.id}", source=a.id, target=b.id)
        for a, b in zip(nodes, nodes[1:])
    ]
    return PipelineGraph(name=name or f"Deploy {stack} App", nodes=nodes, edges=edges)
