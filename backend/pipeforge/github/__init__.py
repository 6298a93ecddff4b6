"""GitHub repository access for stack detection."""

from pipeforge.github.client import (
    GitHubAPIError,
    GitHubClient,
    GitHubError,
    InvalidRepositoryURL,
    RepositoryRef,
    detect_stack_from_github,
    is_valid_repo_url,
    parse_repo_url,
)

__all__ = [
    "GitHubAPIError",
    "GitHubClient",
    "GitHubError",
    "InvalidRepositoryURL",
    "RepositoryRef",
    "detect_stack_from_github",
    "is_valid_repo_url",
    "parse_repo_url",
]
