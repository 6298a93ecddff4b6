"""Step Catalog - read-only reference data for every step kind.

Maps each ``StepKind`` to its display metadata, the configuration a new
canvas node starts with, and the renderer the compiler dispatches to.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from pipeforge.pipeline import steps
from pipeforge.pipeline.models import StepKind
from pipeforge.pipeline.steps import StepRenderer

DefaultsFactory = Callable[[str], dict[str, Any]]


@dataclass(frozen=True)
class StepDefinition:
    """Reference entry for one step kind."""
    kind: StepKind
    label: str
    category: str  # source, build, test, deploy, notification
    description: str
    renderer: StepRenderer
    defaults: DefaultsFactory

    def default_config(self, stack: str = "") -> dict[str, Any]:
        return self.defaults(stack)


def _no_defaults(stack: str) -> dict[str, Any]:
    return {}


_DEFINITIONS = (
    StepDefinition(
        kind=StepKind.SOURCE_CHECKOUT,
        label="Checkout",
        category="source",
        description="Check out the repository",
        renderer=steps.render_checkout,
        defaults=lambda stack: {"version": "v3"},
    ),
    StepDefinition(
        kind=StepKind.RUNTIME_SETUP,
        label="Setup Runtime",
        category="build",
        description="Install the language runtime",
        renderer=steps.render_setup,
        defaults=lambda stack: {
            "runtime": steps.default_runtime(stack),
            "version": steps.DEFAULT_RUNTIME_VERSION,
        },
    ),
    StepDefinition(
        kind=StepKind.DEPENDENCY_INSTALL,
        label="Install Dependencies",
        category="build",
        description="Install project dependencies",
        renderer=steps.render_install,
        defaults=lambda stack: {"command": steps.default_command("install", stack)},
    ),
    StepDefinition(
        kind=StepKind.TEST,
        label="Run Tests",
        category="test",
        description="Run the test suite",
        renderer=steps.render_test,
        defaults=lambda stack: {"command": steps.default_command("test", stack)},
    ),
    StepDefinition(
        kind=StepKind.BUILD,
        label="Build",
        category="build",
        description="Build the application",
        renderer=steps.render_build,
        defaults=lambda stack: {"command": steps.default_command("build", stack)},
    ),
    StepDefinition(
        kind=StepKind.DEPLOY,
        label="Deploy",
        category="deploy",
        description="Deploy build output to the cloud",
        renderer=steps.render_deploy,
        defaults=lambda stack: {
            "target": steps.DEFAULT_DEPLOY_TARGET,
            "region": steps.DEFAULT_DEPLOY_REGION,
        },
    ),
    StepDefinition(
        kind=StepKind.NOTIFY,
        label="Notify",
        category="notification",
        description="Report the pipeline status",
        renderer=steps.render_notify,
        defaults=_no_defaults,
    ),
    StepDefinition(
        kind=StepKind.CUSTOM,
        label="Custom Step",
        category="build",
        description="Placeholder for a step with no built-in template",
        renderer=steps.render_custom,
        defaults=_no_defaults,
    ),
)

STEP_CATALOG: Mapping[StepKind, StepDefinition] = MappingProxyType(
    {definition.kind: definition for definition in _DEFINITIONS}
)


def get_definition(kind: StepKind | str) -> StepDefinition:
    """Definition for a kind; unknown kinds get the custom entry."""
    return STEP_CATALOG.get(StepKind.parse(kind), STEP_CATALOG[StepKind.CUSTOM])


def renderer_for(kind: StepKind | str) -> StepRenderer:
    return get_definition(kind).renderer


def default_config(kind: StepKind | str, stack: str = "") -> dict[str, Any]:
    """Fresh configuration for a new node of ``kind``."""
    return get_definition(kind).default_config(stack)
