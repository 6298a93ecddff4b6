#!/usr/bin/env python3
"""Command line interface for pipeforge.

Commands:
    detect URL                 Detect the stack of a GitHub repository
    detect --files F [F ...]   Score a stack from filenames alone
    compile GRAPH --stack S    Compile a pipeline graph (JSON or YAML) to a workflow
    policy SCOPE               Print the access policy for a scope
    generate --stack S --scope SCOPE [--pipeline GRAPH] [--output-dir DIR]

Usage:
    python -m pipeforge.cli detect https://github.com/owner/repo
    python -m pipeforge.cli compile pipeline.json --stack React
    python -m pipeforge.cli policy deploy-only
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pipeforge.config import POLICY_SCOPES, settings
from pipeforge.generator import GenerateRequest, generate
from pipeforge.github import detect_stack_from_github
from pipeforge.logging_config import setup_logging
from pipeforge.pipeline import PipelineGraph, assemble_workflow, pipeline_compiler
from pipeforge.policies import render_policy
from pipeforge.stacks import stack_scorer

logger = logging.getLogger(__name__)

WORKFLOW_FILENAME = "deploy.yml"
POLICY_FILENAME = "iam-policy.json"


class InputFileError(Exception):
    """Raised when a pipeline file cannot be read or parsed."""


def load_graph(path: Path) -> PipelineGraph:
    """Load a pipeline graph from a JSON or YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except OSError as e:
        raise InputFileError(f"Could not read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InputFileError(f"Invalid pipeline file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InputFileError(f"Pipeline file {path} must contain an object with nodes and edges")

    try:
        return PipelineGraph.model_validate(data)
    except ValidationError as e:
        raise InputFileError(f"Invalid pipeline in {path}: {e}") from e


async def cmd_detect(args: argparse.Namespace) -> int:
    """Detect a stack from a repository URL or a list of filenames."""
    if args.files:
        stack = stack_scorer.score_filenames(args.files)
    elif args.url:
        stack = await detect_stack_from_github(args.url)
    else:
        logger.error("Provide a repository URL or --files")
        return 2

    print(stack)
    return 0


def cmd_compile(args: argparse.Namespace) -> int:
    """Compile a pipeline graph into a workflow document."""
    try:
        graph = load_graph(args.graph)
    except InputFileError as e:
        logger.error(str(e))
        return 1

    compiled = pipeline_compiler.compile(graph, args.stack)
    if compiled.unresolved:
        logger.warning(f"Steps placed after a cycle: {', '.join(compiled.unresolved)}")

    if args.blocks:
        print(json.dumps([block.text for block in compiled.blocks], indent=2))
    else:
        print(assemble_workflow(compiled.blocks, name=args.name or graph.name or None), end="")
    return 0


def cmd_policy(args: argparse.Namespace) -> int:
    """Print the access policy for a scope."""
    print(render_policy(args.scope))
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate both the workflow and the access policy."""
    try:
        graph = load_graph(args.pipeline) if args.pipeline else None
        request = GenerateRequest(
            stack=args.stack,
            cloud=args.cloud,
            scope=args.scope,
            pipeline=graph,
            name=args.name,
        )
    except (InputFileError, ValidationError) as e:
        logger.error(str(e))
        return 1

    artifacts = generate(request)

    if args.output_dir:
        out: Path = args.output_dir
        out.mkdir(parents=True, exist_ok=True)
        (out / WORKFLOW_FILENAME).write_text(artifacts.ci, encoding="utf-8")
        (out / POLICY_FILENAME).write_text(artifacts.iam + "\n", encoding="utf-8")
        logger.info(f"Wrote {WORKFLOW_FILENAME} and {POLICY_FILENAME} to {out}")
    else:
        print(artifacts.ci)
        print(artifacts.iam)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipeforge",
        description="Generate CI workflows and access policies",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Detect a project's stack")
    detect.add_argument("url", nargs="?", help="GitHub repository URL")
    detect.add_argument("--files", nargs="+", help="Score these root filenames instead of a URL")

    compile_ = subparsers.add_parser("compile", help="Compile a pipeline graph")
    compile_.add_argument("graph", type=Path, help="Pipeline graph file (JSON or YAML)")
    compile_.add_argument("--stack", default="", help="Stack label used for defaults")
    compile_.add_argument("--name", help="Workflow name")
    compile_.add_argument("--blocks", action="store_true", help="Print step blocks as a JSON list")

    policy = subparsers.add_parser("policy", help="Print an access policy")
    policy.add_argument("scope", choices=POLICY_SCOPES)

    gen = subparsers.add_parser("generate", help="Generate workflow and policy")
    gen.add_argument("--stack", required=True)
    gen.add_argument("--cloud", default="AWS")
    gen.add_argument("--scope", default=settings.default_policy_scope)
    gen.add_argument("--pipeline", type=Path, help="Pipeline graph file (JSON or YAML)")
    gen.add_argument("--name", help="Workflow name")
    gen.add_argument("--output-dir", type=Path, help="Write files here instead of stdout")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug or settings.debug, json_logs=args.json_logs or settings.json_logs)

    if args.command == "detect":
        return asyncio.run(cmd_detect(args))
    if args.command == "compile":
        return cmd_compile(args)
    if args.command == "policy":
        return cmd_policy(args)
    return cmd_generate(args)


if __name__ == "__main__":
    sys.exit(main())
