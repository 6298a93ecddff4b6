"""Access policies - IAM policy documents for each deployment scope."""

import copy
import json
import logging
from enum import Enum
from typing import Any

from pipeforge.config import settings

logger = logging.getLogger(__name__)

BUCKET_RESOURCES = [
    "arn:aws:s3:::your-bucket-name",
    "arn:aws:s3:::your-bucket-name/*",
]


class PolicyScope(str, Enum):
    """How much the CI credentials are allowed to do."""
    READ_ONLY = "read-only"
    DEPLOY_ONLY = "deploy-only"
    FULL_ACCESS = "full-access"


def _statement(actions: list[str], resource: Any) -> dict[str, Any]:
    return {"Effect": "Allow", "Action": actions, "Resource": resource}


POLICY_STATEMENTS: dict[PolicyScope, list[dict[str, Any]]] = {
    PolicyScope.DEPLOY_ONLY: [
        _statement(
            [
                "s3:PutObject",
                "s3:PutObjectAcl",
                "s3:GetObject",
                "s3:DeleteObject",
                "s3:ListBucket",
            ],
            BUCKET_RESOURCES,
        ),
        _statement(["cloudfront:CreateInvalidation"], "*"),
    ],
    PolicyScope.READ_ONLY: [
        _statement(["s3:GetObject", "s3:ListBucket"], BUCKET_RESOURCES),
    ],
    PolicyScope.FULL_ACCESS: [
        _statement(["s3:*"], BUCKET_RESOURCES),
        _statement(["cloudfront:*"], "*"),
    ],
}


def resolve_scope(scope: str | PolicyScope, default: PolicyScope | None = None) -> PolicyScope:
    """Map a scope name to a PolicyScope, falling back to ``default``.

    Without an explicit default the configured ``default_policy_scope`` is used.
    """
    default = default or PolicyScope(settings.default_policy_scope)
    try:
        return PolicyScope(scope)
    except ValueError:
        logger.warning(f"Unknown policy scope '{scope}', using {default.value}")
        return default


def build_policy(scope: str | PolicyScope) -> dict[str, Any]:
    """Policy document for a scope."""
    resolved = resolve_scope(scope)
    return {
        "Version": "2012-10-17",
        "Statement": copy.deepcopy(POLICY_STATEMENTS[resolved]),
    }


def render_policy(scope: str | PolicyScope) -> str:
    """Policy document as pretty-printed JSON."""
    return json.dumps(build_policy(scope), indent=2)
