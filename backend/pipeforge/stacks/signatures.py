"""Stack signatures - reference rules for stack detection.

The table is loaded once from ``signatures.yaml`` at import time and exposed
as the immutable tuple ``SIGNATURES``. Order is significant: it is the
tie-break order used by the scorer.
"""

import logging
import re
from functools import cached_property
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

SIGNATURES_FILE = Path(__file__).parent / "signatures.yaml"


class Signature(BaseModel):
    """A named stack candidate and the evidence that points to it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    files: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    manifests: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    priority: float = Field(..., gt=0)

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Extensions are suffixes and must not be empty."""
        if any(not ext for ext in v):
            raise ValueError("Extensions must be non-empty suffixes")
        return v

    @cached_property
    def file_patterns(self) -> tuple[re.Pattern[str], ...]:
        """Compiled, anchored patterns for ``files`` (``*`` = any run)."""
        return tuple(compile_pattern(p) for p in self.files)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Turn a filename pattern into a full-match regex.

    Only ``*`` is special; every other character matches literally.
    """
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def load_signatures(path: Path = SIGNATURES_FILE) -> tuple[Signature, ...]:
    """Load and validate the signature table from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, list):
        raise ValueError(f"Signature file {path} must contain a YAML list")

    signatures = tuple(Signature.model_validate(entry) for entry in data)

    names = [s.name for s in signatures]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        raise ValueError(f"Duplicate signature names: {', '.join(sorted(duplicates))}")

    logger.debug(f"Loaded {len(signatures)} stack signatures from {path.name}")
    return signatures


SIGNATURES: tuple[Signature, ...] = load_signatures()

# Stacks a user can pick manually, in the order they are offered
SUPPORTED_STACKS: tuple[str, ...] = (
    "React",
    "Next.js",
    "Vue.js",
    "Angular",
    "Node.js",
    "Python (Django/Flask)",
    "Java (Spring)",
    "Go",
    "Rust",
    ".NET",
    "PHP (Laravel)",
    "Ruby (Rails)",
)

CLOUD_PROVIDERS: tuple[str, ...] = ("AWS",)
