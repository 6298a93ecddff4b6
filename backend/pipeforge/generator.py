"""Template generation of CI workflow and access policy documents.

Produces both artifacts for a request without any text-generation
service: the workflow comes from compiling the caller's pipeline, or the
default pipeline for the stack when none was drawn.
"""

import logging

from pydantic import BaseModel, Field, field_validator

from pipeforge.pipeline.compiler import pipeline_compiler
from pipeforge.pipeline.models import PipelineGraph
from pipeforge.pipeline.workflow import assemble_workflow, default_pipeline
from pipeforge.policies import render_policy

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    """What the user asked for."""
    stack: str = Field(..., description="Stack label, detected or picked manually")
    cloud: str = Field(..., description="Cloud provider, e.g. 'AWS'")
    scope: str = Field(..., description="Access scope: read-only, deploy-only, full-access")
    pipeline: PipelineGraph | None = Field(default=None, description="Graph drawn on the canvas")
    name: str | None = Field(default=None, description="Workflow name override")

    @field_validator("stack", "cloud", "scope")
    @classmethod
    def validate_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Missing required parameter")
        return v.strip()


class GeneratedArtifacts(BaseModel):
    """Generated documents."""
    ci: str
    iam: str
    is_ai_generated: bool = False
    unresolved_steps: list[str] = Field(default_factory=list)


def generate(request: GenerateRequest) -> GeneratedArtifacts:
    """Generate the CI workflow and IAM policy for a request."""
    graph = request.pipeline or default_pipeline(request.stack)
    compiled = pipeline_compiler.compile(graph, request.stack)

    name = request.name or graph.name or None
    ci = assemble_workflow(compiled.blocks, name=name)
    iam = render_policy(request.scope)

    logger.info(
        f"Generated workflow with {len(compiled.blocks)} step(s) for scope {request.scope}",
        extra={"stack": request.stack},
    )
    return GeneratedArtifacts(ci=ci, iam=iam, unresolved_steps=compiled.unresolved)
