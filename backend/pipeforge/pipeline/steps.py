"""Step renderers - turn one pipeline node into workflow step text.

Each renderer takes the node and the resolved stack label and returns one
or more self-contained step blocks. Blocks are written at column zero;
the workflow assembler indents them under ``steps:``.
"""

from typing import Any, Callable

import yaml

from pipeforge.pipeline.models import PipelineNode

StepRenderer = Callable[[PipelineNode, str], list[str]]

# Stack labels that belong to the npm ecosystem
NODE_STACKS = frozenset({"React", "Next.js", "Vue.js", "Angular"})

DEFAULT_RUNTIME_VERSION = "18"
DEFAULT_DEPLOY_REGION = "us-east-1"
DEFAULT_DEPLOY_TARGET = "AWS S3"

# (node, python-family) default commands per step kind
DEFAULT_COMMANDS: dict[str, tuple[str, str]] = {
    "install": ("npm ci", "pip install -r requirements.txt"),
    "test": ("npm test", "pytest"),
    "build": ("npm run build", "python setup.py build"),
}


def yaml_scalar(value: str) -> str:
    """``value`` as a YAML scalar, quoted only when plain text would not parse."""
    dumped = yaml.safe_dump({"v": value}, width=float("inf"), allow_unicode=True)
    return dumped[len("v: "):].rstrip("\n")


def is_node_stack(stack_hint: str) -> bool:
    """True when the stack label names a Node.js-ecosystem stack."""
    hint = stack_hint or ""
    return "Node" in hint or hint in NODE_STACKS


def default_runtime(stack_hint: str) -> str:
    return "node" if is_node_stack(stack_hint) else "python"


def default_command(step: str, stack_hint: str) -> str:
    node_cmd, python_cmd = DEFAULT_COMMANDS[step]
    return node_cmd if is_node_stack(stack_hint) else python_cmd


def _config_value(config: dict[str, Any], key: str, default: str) -> str:
    """Config value as text; missing, None, and blank values use the default."""
    value = config.get(key)
    if value is None or str(value).strip() == "":
        return default
    return str(value)


def render_checkout(node: PipelineNode, stack_hint: str) -> list[str]:
    return [
        "- name: Checkout code\n"
        "  uses: actions/checkout@v3"
    ]


def render_setup(node: PipelineNode, stack_hint: str) -> list[str]:
    runtime = _config_value(node.config, "runtime", default_runtime(stack_hint))
    version = _config_value(node.config, "version", DEFAULT_RUNTIME_VERSION)

    if runtime == "node":
        return [
            "- name: Setup Node.js\n"
            "  uses: actions/setup-node@v3\n"
            "  with:\n"
            f"    node-version: {yaml_scalar(version)}\n"
            "    cache: 'npm'"
        ]
    return [
        "- name: Setup Python\n"
        "  uses: actions/setup-python@v3\n"
        "  with:\n"
        f"    python-version: {yaml_scalar(version)}"
    ]


def _command_renderer(step: str, title: str) -> StepRenderer:
    def render(node: PipelineNode, stack_hint: str) -> list[str]:
        command = _config_value(node.config, "command", default_command(step, stack_hint))
        return [f"- name: {title}\n  run: {yaml_scalar(command)}"]

    render.__name__ = f"render_{step}"
    return render


render_install = _command_renderer("install", "Install dependencies")
render_test = _command_renderer("test", "Run tests")
render_build = _command_renderer("build", "Build application")


def render_deploy(node: PipelineNode, stack_hint: str) -> list[str]:
    region = _config_value(node.config, "region", DEFAULT_DEPLOY_REGION)
    target = _config_value(node.config, "target", DEFAULT_DEPLOY_TARGET)
    publish = yaml_scalar(f"Deploy to {target}")
    return [
        "- name: Configure AWS credentials\n"
        "  uses: aws-actions/configure-aws-credentials@v2\n"
        "  with:\n"
        "    aws-access-key-id: ${{ secrets.AWS_ACCESS_KEY_ID }}\n"
        "    aws-secret-access-key: ${{ secrets.AWS_SECRET_ACCESS_KEY }}\n"
        f"    aws-region: {yaml_scalar(region)}",
        f"- name: {publish}\n"
        "  run: |\n"
        "    aws s3 sync ./build s3://your-bucket-name --delete\n"
        '    aws cloudfront create-invalidation --distribution-id YOUR_DISTRIBUTION_ID --paths "/*"',
    ]


def render_notify(node: PipelineNode, stack_hint: str) -> list[str]:
    return [
        "- name: Send notification\n"
        "  if: always()\n"
        "  run: 'echo \"Pipeline completed with status: ${{ job.status }}\"'"
    ]


def render_custom(node: PipelineNode, stack_hint: str) -> list[str]:
    label = node.label or "Custom step"
    run = f'echo "Executing {node.type} step"'
    return [f"- name: {yaml_scalar(label)}\n  run: {yaml_scalar(run)}"]
