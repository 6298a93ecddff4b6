"""Pipeline graphs and their compilation into workflow steps.

- models: nodes, edges, graphs and step blocks
- catalog: read-only reference data per step kind
- compiler: deterministic ordering and rendering
- workflow: document assembly and the default pipeline
"""

from pipeforge.pipeline.catalog import STEP_CATALOG, StepDefinition, default_config, get_definition
from pipeforge.pipeline.compiler import PipelineCompiler, pipeline_compiler
from pipeforge.pipeline.models import (
    CompiledPipeline,
    PipelineEdge,
    PipelineGraph,
    PipelineNode,
    StepBlock,
    StepKind,
)
from pipeforge.pipeline.workflow import assemble_workflow, default_pipeline

__all__ = [
    "CompiledPipeline",
    "PipelineCompiler",
    "PipelineEdge",
    "PipelineGraph",
    "PipelineNode",
    "STEP_CATALOG",
    "StepBlock",
    "StepDefinition",
    "StepKind",
    "assemble_workflow",
    "default_config",
    "default_pipeline",
    "get_definition",
    "pipeline_compiler",
]
