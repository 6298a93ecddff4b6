"""Stack detection from repository file evidence."""

from pipeforge.stacks.scorer import (
    UNKNOWN_STACK,
    ContentFetcher,
    Evidence,
    StackScore,
    StackScorer,
    score_stack,
    stack_scorer,
)
from pipeforge.stacks.signatures import (
    CLOUD_PROVIDERS,
    SIGNATURES,
    SUPPORTED_STACKS,
    Signature,
    load_signatures,
)

__all__ = [
    "CLOUD_PROVIDERS",
    "ContentFetcher",
    "Evidence",
    "SIGNATURES",
    "SUPPORTED_STACKS",
    "Signature",
    "StackScore",
    "StackScorer",
    "UNKNOWN_STACK",
    "load_signatures",
    "score_stack",
    "stack_scorer",
]
