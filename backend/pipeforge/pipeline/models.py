"""Pipeline Models - Pydantic models for pipeline graphs.

A graph arrives from the canvas as nodes plus edges. Nodes carry a raw
kind string and free-form configuration; the closed ``StepKind`` vocabulary
is derived from the raw string so unknown kinds survive as ``custom``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class StepKind(str, Enum):
    """Closed vocabulary of pipeline step kinds."""
    SOURCE_CHECKOUT = "source-checkout"
    RUNTIME_SETUP = "runtime-setup"
    DEPENDENCY_INSTALL = "dependency-install"
    TEST = "test"
    BUILD = "build"
    DEPLOY = "deploy"
    NOTIFY = "notify"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: "str | StepKind") -> "StepKind":
        """Resolve a raw kind string; anything unrecognized is CUSTOM."""
        if isinstance(value, StepKind):
            return value
        key = (value or "").strip().lower()
        if key in KIND_ALIASES:
            return KIND_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            return cls.CUSTOM


# Short names used by the canvas
KIND_ALIASES: dict[str, StepKind] = {
    "checkout": StepKind.SOURCE_CHECKOUT,
    "setup": StepKind.RUNTIME_SETUP,
    "install": StepKind.DEPENDENCY_INSTALL,
}


class PipelineNode(BaseModel):
    """A single step in the pipeline graph."""
    id: str = Field(..., min_length=1, description="Opaque node identifier, unique per graph")
    type: str = Field(default="custom", description="Raw step kind as sent by the caller")
    label: str = Field(default="", description="Display label")
    config: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def lift_canvas_data(cls, data: Any) -> Any:
        """Accept the canvas shape ``{"id", "type", "data": {"label", "config"}}``."""
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = dict(data)
            inner = data.pop("data")
            data.setdefault("label", inner.get("label") or "")
            data.setdefault("config", inner.get("config") or {})
        return data

    @property
    def kind(self) -> StepKind:
        return StepKind.parse(self.type)


class PipelineEdge(BaseModel):
    """Ordering constraint: ``source`` completes before ``target`` starts."""
    source: str
    target: str
    id: str | None = None

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class PipelineGraph(BaseModel):
    """Nodes and edges for one compile call."""
    name: str = ""
    nodes: list[PipelineNode] = Field(default_factory=list)
    edges: list[PipelineEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "PipelineGraph":
        """Node ids must be unique."""
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return self

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}


@dataclass(frozen=True)
class StepBlock:
    """One rendered unit of workflow text."""
    node_id: str
    kind: StepKind
    text: str


@dataclass
class CompiledPipeline:
    """Result of compiling a graph: order, rendered blocks, degraded nodes."""
    order: list[PipelineNode] = field(default_factory=list)
    blocks: list[StepBlock] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    @property
    def has_cycle(self) -> bool:
        return bool(self.unresolved)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.blocks)
