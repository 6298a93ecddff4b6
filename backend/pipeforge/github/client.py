"""GitHub collaborator - repository URL parsing and contents API access.

Supplies the stack scorer with a root file listing and a manifest content
fetcher. The scorer never talks to GitHub itself.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from types import TracebackType
from urllib.parse import urlparse

import httpx

from pipeforge.config import settings
from pipeforge.stacks.scorer import UNKNOWN_STACK, ContentFetcher, StackScorer, stack_scorer

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Base error for GitHub access."""


class InvalidRepositoryURL(GitHubError):
    """Raised when a URL does not name a GitHub repository."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid GitHub repository URL: {url!r}")


class GitHubAPIError(GitHubError):
    """Raised when the contents API fails or returns an unexpected payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_url(url: str) -> RepositoryRef:
    """Extract owner and repository from a github.com URL."""
    try:
        parsed = urlparse(url.strip())
    except (AttributeError, ValueError):
        raise InvalidRepositoryURL(str(url))

    if parsed.scheme not in ("http", "https") or parsed.hostname != "github.com":
        raise InvalidRepositoryURL(url)

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        raise InvalidRepositoryURL(url)

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        raise InvalidRepositoryURL(url)

    return RepositoryRef(owner=owner, repo=repo)


def is_valid_repo_url(url: str) -> bool:
    try:
        parse_repo_url(url)
    except InvalidRepositoryURL:
        return False
    return True


class GitHubClient:
    """Async client for the repository contents API.

    Usage:
        async with GitHubClient() as client:
            names = await client.list_root(ref)
            text = await client.fetch_file(ref, "package.json")
    """

    def __init__(
        self,
        api_base: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = (api_base or settings.github_api_base).rstrip("/")
        self.token = token if token is not None else settings.github_token
        self.timeout = timeout or settings.http_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": settings.app_name,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def __aenter__(self) -> "GitHubClient":
        self._client = httpx.AsyncClient(
            base_url=self.api_base,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, path: str) -> object:
        if self._client is None:
            raise RuntimeError("GitHubClient must be used as an async context manager")
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as e:
            raise GitHubAPIError(f"Timed out requesting {path}") from e
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"Request to {path} failed: {e}") from e

        if response.status_code != 200:
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} for {path}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from {path}") from e

    async def list_root(self, ref: RepositoryRef) -> list[str]:
        """Names of the entries at the repository root."""
        data = await self._get_json(f"/repos/{ref.owner}/{ref.repo}/contents")
        if not isinstance(data, list):
            raise GitHubAPIError(f"Expected a directory listing for {ref.full_name}")
        return [item["name"] for item in data if isinstance(item, dict) and item.get("name")]

    async def fetch_file(self, ref: RepositoryRef, path: str) -> str:
        """Decoded text content of one file."""
        data = await self._get_json(f"/repos/{ref.owner}/{ref.repo}/contents/{path}")
        if not isinstance(data, dict) or data.get("encoding") != "base64" or not data.get("content"):
            raise GitHubAPIError(f"No base64 content for {ref.full_name}/{path}")
        try:
            return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise GitHubAPIError(f"Could not decode {ref.full_name}/{path}") from e

    def fetcher(self, ref: RepositoryRef) -> ContentFetcher:
        """Content fetcher bound to one repository, for the stack scorer."""

        async def fetch(path: str) -> str | None:
            return await self.fetch_file(ref, path)

        return fetch


async def detect_stack_from_github(
    url: str,
    client: GitHubClient | None = None,
    scorer: StackScorer | None = None,
) -> str:
    """Detect a repository's stack; degraded outcomes return ``UNKNOWN_STACK``."""
    scorer = scorer or stack_scorer
    try:
        ref = parse_repo_url(url)
    except InvalidRepositoryURL as e:
        logger.warning(str(e))
        return UNKNOWN_STACK

    async with client or GitHubClient() as gh:
        try:
            filenames = await gh.list_root(ref)
        except GitHubAPIError as e:
            logger.error(f"Error listing repository: {e}", extra={"repo": ref.full_name})
            return UNKNOWN_STACK

        stack = await scorer.detect(filenames, gh.fetcher(ref))

    logger.info(f"Repository stack: {stack}", extra={"repo": ref.full_name, "stack": stack})
    return stack
